from alexagent.observation import (
    NO_RESULT,
    build_tool_definitions,
    build_tool_messages,
    clean_tool_output,
    generate_observation,
    truncate_content,
)
from alexagent.tasks import ToolCall, ToolResult


class EchoTool:
    def __init__(self, name, description="echo tool"):
        self._name = name
        self._description = description

    @property
    def name(self):
        return self._name

    @property
    def description(self):
        return self._description

    @property
    def parameters(self):
        return {"type": "object", "properties": {"text": {"type": "string"}}}

    def execute(self, args, context):
        return ToolResult(success=True, content=args.get("text", ""))


def test_tool_definitions_from_mapping():
    tools = {"bash": EchoTool("bash"), "think": EchoTool("think", "reason")}
    definitions = build_tool_definitions(tools)
    assert sorted(d.function.name for d in definitions) == ["bash", "think"]
    assert all(d.type == "function" for d in definitions)
    by_name = {d.function.name: d for d in definitions}
    assert by_name["think"].function.description == "reason"
    assert by_name["bash"].function.parameters == tools["bash"].parameters


def test_tool_definitions_from_iterable():
    definitions = build_tool_definitions([EchoTool("grep")])
    assert [d.to_dict()["function"]["name"] for d in definitions] == ["grep"]


def test_tool_messages_use_content_or_error():
    results = [
        ToolResult(success=True, content="ok output", tool_name="bash", call_id="c1"),
        ToolResult(success=False, content="ignored", error="boom", tool_name="file_read", call_id="c2"),
    ]
    messages = build_tool_messages(results)
    assert [m.content for m in messages] == ["ok output", "boom"]
    assert [m.tool_call_id for m in messages] == ["c1", "c2"]
    assert [m.name for m in messages] == ["bash", "file_read"]
    assert all(m.role == "user" for m in messages)


def test_tool_messages_generate_missing_call_id():
    [message] = build_tool_messages([ToolResult(success=True, content="x", tool_name="bash")])
    assert message.tool_call_id.startswith("tool_")
    assert message.tool_call_id[len("tool_"):].isdigit()


def test_observation_without_results():
    assert generate_observation(None) == NO_RESULT
    assert generate_observation([]) == "No tool execution result to observe"


def test_observation_failure():
    result = ToolResult(success=False, error="permission denied")
    assert generate_observation([result]) == "❌ Tool execution failed: permission denied"


def test_observation_named_tools():
    for tool, label in [
        ("think", "🧠 Thinking completed"),
        ("todo_update", "📋 Todo management"),
        ("file_read", "📖 File read"),
        ("bash", "⚡ Command executed"),
    ]:
        result = ToolResult(success=True, content="short", tool_calls=[ToolCall(name=tool)])
        assert generate_observation([result]) == f"{label}: short"


def test_observation_other_tool():
    result = ToolResult(success=True, content="found", tool_calls=[ToolCall(name="grep")])
    assert generate_observation([result]) == "✅ grep completed: found"


def test_observation_without_tool_calls():
    result = ToolResult(success=True, content="🔧 ran ls\nnoise")
    assert generate_observation([result]) == "✅ Tool execution successful: 🔧 ran ls"


def test_observation_uses_first_result_only():
    results = [
        ToolResult(success=False, error="first failed"),
        ToolResult(success=True, content="second"),
    ]
    assert generate_observation(results).endswith("first failed")


def test_clean_tool_output_keeps_tool_lines():
    content = "header\n  🔧 bash(ls)  \nbody\n🔧 grep(x)"
    assert clean_tool_output(content) == "🔧 bash(ls)\n🔧 grep(x)"


def test_clean_tool_output_falls_back_to_excerpt():
    content = "plain text " * 10
    cleaned = clean_tool_output(content)
    assert cleaned == content[:50] + "..."
    assert clean_tool_output("tiny") == "tiny"


def test_truncate_content():
    assert truncate_content("abc", 0) == ""
    assert truncate_content("abc", -1) == ""
    assert truncate_content("abc", 3) == "abc"
    assert truncate_content("abcdef", 3) == "abc..."


def test_truncate_counts_characters_not_bytes():
    text = "中文测试内容"
    assert truncate_content(text, 2) == "中文..."
    assert truncate_content(text, len(text)) == text


def test_observation_truncates_long_content():
    content = "x" * 300
    result = ToolResult(success=True, content=content, tool_calls=[ToolCall(name="grep")])
    observation = generate_observation([result])
    prefix = "✅ grep completed: "
    assert observation.startswith(prefix)
    assert observation[len(prefix):] == truncate_content(clean_tool_output(content), 100)