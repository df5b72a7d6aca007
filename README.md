# alexagent

Building blocks for a tool-driven ReAct agent. The package depends only on
the standard library.

It provides these pieces:

- **Text helpers** (`alexagent.text`). A tokenizer for mixed English and
  Chinese text that drops stop words. Word-based compression. Text matching
  and a string hash.
- **Scoring** (`alexagent.scoring`). Content quality, hybrid relevance scores,
  TF-IDF and relevance classes.
- **Records** (`alexagent.tasks`, `alexagent.chat`). Dataclasses for tasks,
  steps, tool calls and tool results. Also chat messages, requests and
  responses, stream deltas and progress chunks (`StreamChunk`).
- **Tool calls** (`alexagent.executor`). Parsing of structured and text-format
  tool calls, and serial execution of tools with progress reporting.
- **Streamed chat** (`alexagent.streaming`). Assembly of stream deltas into one
  response, and a retrying call.
- **Observations** (`alexagent.observation`). Tool definitions for the model,
  tool result messages, and one-line observations.
- **Conversation context** (`alexagent.manager`, `alexagent.preservation`,
  `alexagent.integration`, `alexagent.context_handler`). Token estimation,
  summarisation of older messages, JSON backups of the full history with
  restore, and slash commands.
- **History rendering** (`alexagent.compression`). `LightContextManager`
  renders a task's history as text. Once the history grows long, it keeps
  only the last steps.

## Text and scoring

```python
from alexagent.text import tokenize, compress_text, calculate_text_match
from alexagent.scoring import calculate_quality, classify_relevance

tokenize("Hello World Programming").words   # ['hello', 'world', 'programming']
calculate_text_match("world", "Hello World")  # 1.0
calculate_quality("Task: review\nInput: code", 0).final_score
classify_relevance(0.4)                       # 'high'
```

## Managing long conversations

`ContextManager` takes a summarizer. A summarizer is any object with
`summarize_messages(messages)` that returns a `MessageSummary`. The package
does not contain one that calls a model, so you supply your own.

```python
from alexagent.manager import ContextLengthConfig, ContextManager, MessageSummary
from alexagent.preservation import ContextPreservationManager, Session, SessionMessage

class CountingSummarizer:
    def summarize_messages(self, messages):
        return MessageSummary(summary=f"{len(messages)} earlier messages")

session = Session(id="demo")
session.add_message(SessionMessage(role="user", content="Help me analyse this code"))

manager = ContextManager(
    CountingSummarizer(),
    ContextLengthConfig(max_tokens=8000),
    ContextPreservationManager("./backups"),
)
analysis = manager.check_context_length(session)
result = manager.process_context_overflow(session)   # action "no_action" or "summarized"
if result.action == "summarized":
    manager.restore_full_context(session, result.backup_id)
```

When a session is over its limit, `process_context_overflow` does the
following:

1. It writes a backup of the session.
2. It keeps the system messages and the most recent conversation messages.
   That is at least five messages, or a fifth of the conversation if that is
   more.
3. It puts a summary system message in place of the rest.

`ContextPreservationManager()` without a directory stores backups in
`~/.deep-coding-context-backups`. If that directory cannot be created, it
uses a directory in the system temporary directory. Backups can also be
listed, cleaned up by age and counted with `backup_stats()`.

`ContextHandler.from_summarizer(summarizer)` wraps a manager for a task loop.
It reports overflow handling as `StreamChunk` values. It also builds the
opening system and user messages of a task.

## Slash commands

`ReactAgentContextIntegration(summarizer, config)` trims a session before
`process_message(session, text, process)` hands the message on.
`ContextManagementSlashCommands(integration).handle(session, command, args)`
understands these commands:

- `context-status`
- `context-summarize`
- `context-restore <backup-id>`
- `context-stats`
- `context-enable`
- `context-disable`

Any other command raises `UnknownCommandError`. While context management is
disabled, the summarize and restore commands raise
`ContextManagementDisabledError`.

## Tools and tool calls

A tool has the properties `name`, `description` and `parameters`. It also
has a method `execute(args, context)`. The `context` mapping holds
`working_dir` and, when there is a session, `session_id`. The method returns
a `ToolResult`.

```python
from alexagent.chat import Message
from alexagent.executor import ToolExecutor, parse_tool_calls

calls = parse_tool_calls(Message(role="assistant", content=model_text))
executor = ToolExecutor({tool.name: tool for tool in my_tools})
results = executor.execute_serial(calls, callback=print)
```

A tool that raises gives an unsuccessful result. An unknown tool name is
reported through the callback, and the remaining calls still run.
`alexagent.observation` turns the results into messages for the model and
into a short observation.

## Streamed responses

The `client` passed to `LLMHandler.call_with_retry(client, request,
max_retries)` must provide `chat_stream(request)`, which returns an iterable
of `StreamDelta`. The handler merges content and tool-call fragments into a
`ChatResponse`. It forwards content, reasoning and think text to its callback.
It pauses 2, 4, … seconds between attempts. It does not retry an error whose
message contains `500`. Use `validate_request(request)` to check a request
before sending it.

## What this package does not do

- It has no client for any model service.
- It has no document search engine or text embeddings.
- It has no prompt templates.
- It has no finished agent loop that drives the model and tools end to end.
  You assemble a loop from the pieces above.
- It has no command-line program.

Sessions live in memory. Only the context backups are written to disk.

## Tests

```
pip install .[test]
pytest
```