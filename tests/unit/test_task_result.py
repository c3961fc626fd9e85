import pytest

from task_result import TaskResult


def test_ok():
    result = TaskResult.ok("/tmp/results/out.docx", 1234)
    assert result
    assert result.error is None
    assert result.to_dict() == {"success": True, "file_path": "/tmp/results/out.docx", "file_size": 1234}
    assert "✅" in repr(result)


def test_failure():
    result = TaskResult.failure("File not found: /tmp/x.docx")
    assert not result
    assert result.file_path is None
    assert result.to_dict() == {"success": False, "error": "File not found: /tmp/x.docx"}
    assert "❌" in repr(result)


def test_failure_always_carries_a_message():
    assert TaskResult.failure("").error == "Unknown error"


@pytest.mark.parametrize("kwargs", [
    {"success": True},
    {"success": True, "file_path": "/tmp/out.docx", "error": "boom"},
    {"success": False},
    {"success": False, "error": "boom", "file_path": "/tmp/out.docx"},
])
def test_inconsistent_results_rejected(kwargs):
    with pytest.raises(ValueError):
        TaskResult(**kwargs)
