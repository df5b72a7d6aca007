from typing import Any

import pytest

from alexagent.chat import ChatToolCall, Function, Message
from alexagent.executor import (
    CALL_BEGIN,
    CALL_END,
    CALL_SEP,
    CALLS_BEGIN,
    CALLS_END,
    GREEN_DOT,
    ToolExecutor,
    ToolNotFoundError,
    format_tool_call,
    parse_text_tool_call,
    parse_text_tool_calls,
    parse_tool_calls,
)
from alexagent.preservation import Session
from alexagent.tasks import ToolCall, ToolResult


class EchoTool:
    def __init__(self, name: str = "echo", content: str = "done", fail: bool = False):
        self._name = name
        self._content = content
        self._fail = fail
        self.contexts: list[dict[str, Any]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return "echo tool"

    @property
    def parameters(self) -> dict[str, Any]:
        return {}

    def execute(self, args, context):
        self.contexts.append(dict(context))
        if self._fail:
            raise RuntimeError("boom")
        return ToolResult(success=True, content=self._content, data=args)


def _text_call(body: str) -> str:
    return f"{CALL_BEGIN}{body}{CALL_END}"


def test_parse_structured_tool_calls():
    message = Message(
        role="assistant",
        tool_calls=[ChatToolCall(id="c1", function=Function(name="bash", arguments='{"cmd": "ls"}'))],
    )
    assert parse_tool_calls(message) == [ToolCall(name="bash", arguments={"cmd": "ls"}, call_id="c1")]


def test_parse_generates_missing_id():
    message = Message(role="assistant", tool_calls=[ChatToolCall(function=Function(name="bash"))])
    calls = parse_tool_calls(message)
    assert len(calls) == 1
    assert calls[0].call_id.startswith("call_")
    assert calls[0].arguments == {}


def test_parse_skips_invalid_arguments():
    message = Message(
        role="assistant",
        tool_calls=[ChatToolCall(id="c1", function=Function(name="bash", arguments="{bad"))],
    )
    assert parse_tool_calls(message) == []


def test_parse_falls_back_to_text_format():
    body = 'function' + CALL_SEP + 'file_read\n```json\n{"path": "a.txt"}\n```'
    content = f"intro {CALLS_BEGIN}{_text_call(body)}{CALLS_END} outro"
    calls = parse_tool_calls(Message(role="assistant", content=content))
    assert [c.name for c in calls] == ["file_read"]
    assert calls[0].arguments == {"path": "a.txt"}
    assert calls[0].call_id.startswith("text_")


def test_parse_text_tool_calls_multiple():
    first = "function" + CALL_SEP + "think"
    second = "function" + CALL_SEP + 'bash\n```json\n{"cmd": "pwd"}\n```'
    content = f"{CALLS_BEGIN}{_text_call(first)}{_text_call(second)}{CALLS_END}"
    calls = parse_text_tool_calls(content)
    assert [c.name for c in calls] == ["think", "bash"]
    assert calls[1].arguments == {"cmd": "pwd"}


def test_parse_text_tool_calls_without_markers():
    assert parse_text_tool_calls("plain answer") == []


def test_parse_text_tool_calls_skips_unterminated_call():
    content = f"{CALLS_BEGIN}{CALL_BEGIN}function{CALL_SEP}bash{CALLS_END}"
    assert parse_text_tool_calls(content) == []


@pytest.mark.parametrize(
    "body",
    ["bash", "method" + CALL_SEP + "bash", "function" + CALL_SEP + "   \n"],
)
def test_parse_text_tool_call_rejects(body):
    assert parse_text_tool_call(body) is None


def test_parse_text_tool_call_bad_json_gives_empty_args():
    call = parse_text_tool_call("function" + CALL_SEP + "bash\n```json\n{oops\n```")
    assert call is not None
    assert call.name == "bash"
    assert call.arguments == {}


def test_format_tool_call_without_args():
    assert format_tool_call("bash", {}) == f"{GREEN_DOT} bash()"


def test_format_tool_call_values():
    text = format_tool_call("bash", {"cmd": "ls", "flag": True, "count": 3})
    assert text == f'{GREEN_DOT} bash(cmd="ls", flag=true, count=3)'


def test_format_tool_call_truncates_long_string():
    text = format_tool_call("write", {"body": "x" * 60})
    assert text == f'{GREEN_DOT} write(body="{"x" * 47}...")'


def test_format_tool_call_limits_total_length():
    args = {f"k{i}": "y" * 40 for i in range(5)}
    text = format_tool_call("t", args)
    inner = text[len(f"{GREEN_DOT} t(") : -1]
    assert len(inner) == 100
    assert inner.endswith("...")


def test_execute_tool_unknown_raises():
    executor = ToolExecutor({})
    with pytest.raises(ToolNotFoundError):
        executor.execute_tool("missing", {}, "c1")


def test_execute_tool_success_passes_session_context():
    tool = EchoTool()
    session = Session(id="s1", working_dir="/work")
    executor = ToolExecutor({"echo": tool}, lambda: session)
    result = executor.execute_tool("echo", {"a": 1}, "c1")
    assert result.success
    assert result.content == "done"
    assert result.data == {"a": 1}
    assert result.tool_name == "echo"
    assert result.call_id == "c1"
    assert tool.contexts == [{"working_dir": "/work", "session_id": "s1"}]


def test_execute_tool_failure_is_reported():
    executor = ToolExecutor({"echo": EchoTool(fail=True)})
    result = executor.execute_tool("echo", {}, "c2")
    assert not result.success
    assert result.error == "boom"
    assert result.call_id == "c2"


def test_execute_serial_without_calls():
    results = ToolExecutor({}).execute_serial([], None)
    assert len(results) == 1
    assert not results[0].success
    assert results[0].error == "no tool calls provided"


def test_execute_serial_mixed_results():
    executor = ToolExecutor({"echo": EchoTool(content="z" * 250), "bad": EchoTool("bad", fail=True)})
    chunks = []
    calls = [
        ToolCall(name="echo", arguments={}, call_id="1"),
        ToolCall(name="missing", arguments={}, call_id="2"),
        ToolCall(name="bad", arguments={}, call_id="3"),
    ]
    results = executor.execute_serial(calls, chunks.append)
    assert [r.success for r in results] == [True, False, False]
    assert [r.call_id for r in results] == ["1", "2", "3"]
    assert results[1].error == "tool missing not found"
    assert results[2].error == "boom"
    types = [c.type for c in chunks]
    assert types == [
        "tool_start", "tool_result",
        "tool_start", "tool_error",
        "tool_start", "tool_result", "tool_error",
    ]
    assert chunks[1].content == "z" * 200 + "..."
    assert chunks[-1].content == "bad: boom"