# cua

`cua` is the core of a computer use agent. It is a model that looks at the
screen, decides on one action, carries it out, and repeats until the task
is done or it needs help. The package holds the parts of that loop that do
not depend on a particular screen, input device or model vendor:

- **Task memory** (`cua.task_memory.TaskMemory`). This is a bounded record
  of a running task. It keeps the original request, a sliding window of the
  last five actions, milestones (at most twenty), the current workflow
  phase, key facts, and failed patterns (at most ten). `to_prompt()` turns
  it into the context block that is given to the model on every iteration.
  `summary()` returns an immutable `TaskSummary`, and its `for_context()`
  method renders a report in a different style.
- **Progressive summarization** (`cua.summarizer.Summarizer`). When more
  actions pile up than the window holds, the older ones are folded into
  milestones. A run of successful actions becomes one milestone. A failed
  action becomes its own "Attempted … (failed)" milestone.
- **Phase detection** (`cua.records.detect_phase`). It reads an
  `Observation` of the screen and returns a `Phase`. The signals are login
  forms, search boxes, checkout elements, confirmation messages, visible
  text and the role of the focused element.
- **The run loop** (`cua.runner.Runner`, `cua.loop_agent.LoopAgent`,
  `cua.loop_agent.LlmAgent`). This is a ReAct loop over model events. Each
  tool call becomes a `Step`. The loop counts actions against a limit,
  updates task memory after every step, and stops after five consecutive
  failures. At the end it returns a `RunResult`.
- **The agent facade** (`cua.agent.Agent`). It runs one task at a time
  with `do()` or `do_with_progress()`. `stop()` cancels the running task
  and `is_running()` reports whether one is in progress. The facade is
  configured through `AgentConfig` and `SafetyLevel`.
- **Errors** (`cua.errors`). Every failure is a subclass of `CuaError`.
  Contextual errors such as `ActionError`, `TaskError`, `ElementError`,
  `MissingPermissionError` and `SafetyError` carry details about what
  failed.

## API keys

The agent needs a key for its model. `cua.agent.resolve_api_key(config)`
looks for the key in three places, in this order:

1. the configuration itself;
2. the `GOOGLE_API_KEY` environment variable;
3. the `GEMINI_API_KEY` environment variable.

If none of them holds a key, it raises `NoAPIKeyError`.

During development the key is usually kept in a `.env` file.
`cua.env.load_env()` looks for `.env` in the current directory first, then
in up to three parent directories, and loads the first one it finds. If no
file exists, it does nothing.

```python
from cua.env import load_env

load_env()
```

A `.env` file for local work looks like this:

```
GOOGLE_API_KEY=placeholder
```

## Task memory at a glance

A `TaskMemory` changes in these ways:

- `record_action(action, args, success, result, duration)` adds one step.
  A success resets the consecutive-failure count. A failure increments it
  and records the last error.
- `is_stuck()` becomes true after three consecutive failures.
- `needs_help()` becomes true after five consecutive failures.
- `set_phase(phase)` switches to a new phase. It folds the previous phase
  into a milestone and clears the recent actions.
- `maybe_update_phase(obs)` detects the phase from an observation and
  switches only when the detected phase is known and different from the
  current one.
- `set_key_fact(key, value)` and `get_key_fact(key)` store and look up
  extracted values, such as a price or a search term.
- `add_failed_pattern(pattern)` and `has_failed_pattern(pattern)` record
  approaches that did not work, so the model is told to avoid them.

The prompt produced by `to_prompt()` has these parts, in this order:

1. the task, which is never truncated;
2. what has been accomplished;
3. the current phase and key facts;
4. recent actions, marked with ✓ or ✗;
5. known issues;
6. a warning when the agent is possibly stuck or needs help.

## Deciding what to do with an error

```python
from cua.errors import is_fatal, is_retryable

def handle(err):
    if is_fatal(err):
        raise err
    if is_retryable(err):
        return "retry"
    return "skip"
```

`is_retryable` returns true in two cases: when the agent was rate limited,
and when an `ActionError` was caused by an element that was not found yet.

`is_fatal` returns true for a missing API key, denied permissions, an
unsupported operation, a human takeover and cancellation.