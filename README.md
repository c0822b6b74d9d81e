# rmfsched

`rmfsched` holds the task side of a scheduler for robot fleets. It turns
event details into robot task requests, asks the fleet task API for time
and battery estimates, starts, pauses, resumes and cancels robot tasks,
and follows their state reports. It also provides a node that answers
scheduler API requests and nodes that load plugins into a scheduler. All
communication goes over a small in-process publish/subscribe bus.

Python 3.10 or later. Only the standard library is used.

## Modules

### `rmfsched.errors`

`SchedulerError` is the base of every error in the package. Its message
may be a `%`-style template followed by arguments. The subclasses are
`PluginError`, `InvalidTaskSchemaError` and
`InvalidEstimateInterfaceError`. No module in the package raises the last
one; it is there for scheduler code to use.

### `rmfsched.event`

`Event` is a dataclass with `description`, `type`, `start_time` and
`duration` (nanoseconds), `id`, `series_id`, `dag_id`, and
`event_details` / `task_details` (JSON text).

### `rmfsched.plugin`

- `TaskPluginBase`: abstract base with `init(node)`.
- `BuilderInterface`: adds `build_task(event_details)`, which returns the
  task details.
- `PluginRegistry`: `register(name, factory)` records a factory for a
  plugin type and `create(name)` calls it. Registering a name twice or
  creating an unknown type raises `PluginError`.
- `TaskPluginManager(registry, base=TaskPluginBase, base_plugin_name=None)`:
  - `load_plugin(node, name, plugin, supported_task_types)` creates the
    plugin, checks that it is an instance of `base`, calls its `init(node)`
    and records it for the given task types. It raises `PluginError` when
    the name is empty or already taken, when the instance has the wrong
    base class, or when a task type is already served by another plugin.
  - `unload_plugin(name)` removes the plugin and frees its task types, or
    raises `PluginError` if there is no such plugin.
  - `get_supported_plugin(task_type)` returns `(name, plugin)` and raises
    `KeyError` if no plugin serves the type.
  - `get_plugin(name)` returns the plugin or `None`. `plugins()` returns a
    copy of all loaded plugins. `is_supported(task_type)` tells whether a
    plugin serves the type.

### `rmfsched.estimate`

Dataclasses `EstimateState` (`waypoint`, `orientation`, `consumables`),
`EstimateStates` (`start`, `end`), `EstimateRequest` (`start_time` in ns,
`details`, optional `state`) and `EstimateResponse` (`deployment_time`,
`finish_time`, `duration` in ns, and `state`). `EstimateInterface` is the
plugin base whose `async_estimate(id, request)` returns a
`concurrent.futures.Future`.

### `rmfsched.execution`

`ExecutionObserverBase` declares `completion_callback(id, success, detail)`
and `update(id, remaining_time)`. `ExecutionInterface` declares `start`,
`pause`, `resume` and `cancel`. It keeps a list of observers
(`attach` / `detach`). `update(...)` and `notify_completion(...)` pass the
call on to every attached observer.

### `rmfsched.node`

- `ApiRequest` and `ApiResponse`: `json_msg` plus `request_id`.
- `MessageBus(synchronous=True)`: `subscribe`, `unsubscribe`, `publish`,
  `spin` and `shutdown`. A synchronous bus delivers each message inside
  `publish`. In that mode `spin` only waits for `shutdown`. An
  asynchronous bus queues messages, and `spin` delivers them until
  `shutdown` is called.
- `Publisher`: publishes on one topic.
- `Node(name, namespace="/", *, bus=None, parameters=None)`: the methods
  are `create_publisher`, `create_subscription`, `has_parameter`,
  `get_parameter`, `declare_parameter`, `undeclare_parameter` and
  `list_parameter_prefixes`. The last returns the sorted prefixes of
  parameters named `<prefix>.<key>`.
- `declare_or_get_param(node, name, default=None, expected_type=None)`
  returns the parameter, declaring it with `default` if it is missing. An
  integer given where a float is expected comes back as a float. Any other
  type mismatch raises `InvalidParameterTypeError`, which is both a
  `SchedulerError` and a `TypeError`.

### `rmfsched.slug`

`to_slug(text)` replaces spaces and dashes with underscores and
lower-cases ASCII letters:

```python
from rmfsched.slug import to_slug

to_slug("Tiny Robot-1")  # "tiny_robot_1"
```

### `rmfsched.robot_task_builder`

`RobotTaskBuilder.build_task(event_details)` copies `request` and turns
`robot` and `fleet` into slugs:

```python
from rmfsched.robot_task_builder import RobotTaskBuilder

RobotTaskBuilder().build_task({
    "request": {"category": "patrol"},
    "robot": "Tiny Robot-1",
    "fleet": "Delivery Fleet",
})
# {"request": {"category": "patrol"}, "robot": "tiny_robot_1", "fleet": "delivery_fleet"}
```

It raises `InvalidTaskSchemaError` in either of these cases:

- `request` is missing;
- `robot` or `fleet` is not a string.

### `rmfsched.robot_task_estimate_client`

After `init(node)`, `RobotTaskEstimateClient.async_estimate(id, request)`
publishes an `estimate_task_request` on `/task_api_requests` and returns a
future. If the request carries a state, its time is sent in milliseconds.
`handle_response` listens on `/task_api_responses` and resolves the future
whose request id matches. Millisecond times in the response become
nanoseconds. A response without the expected fields sets an
`InvalidTaskSchemaError` on the future. Responses that are not valid JSON
are logged and ignored. Calling `async_estimate` before `init` raises
`RuntimeError`.

### `rmfsched.robot_task_execution_client`

`RobotTaskExecutionClient(clock=time.time)` does the following:

- `init(node, start_health_thread=True)` publishes on
  `/task_api_requests` and `/custom_api_requests` and subscribes to
  `/task_states`.
- `start(id, task_details)` publishes a `robot_task_request` and starts
  tracking the task as `idle`. Malformed details are logged, not raised.
- `pause(id)` and `resume(id)` send `pause_task_request` and
  `resume_task_request` with request ids `pause_<id>` and `resume_<id>`.
  `cancel(id)` sends `cancel_task_request` with request id `cancel_<id>`.
- `handle_response(response)` records the reported status.
  - `completed` notifies observers of success.
  - `failed`, `canceled` and `killed` notify them of failure.
  - Any other status sends observers an `update` with five minutes of
    remaining time.
- `update_health(now=None)` marks as `failed` any task that is still
  active and has not reported for more than ten seconds. It notifies
  observers and returns the ids it failed. With the health thread started,
  this runs every half second until `stop()` is called.
- `task_status(id)` returns a copy of the task's `TaskStatus`.

### `rmfsched.log_handler`

`SchedulerLogHandler(ns="")` has `log(file, line, level, message)`, which
emits on the standard `logging` logger given by `logger_name()`. That name
is `RMF_Scheduler`, or `<ns>/RMF_Scheduler` when a namespace is set.
`LogLevel.FATAL` maps to `CRITICAL`. There are module-level functions to
manage one shared handler:

- `register_scheduler_log_handler(ns)` installs it once.
- `unregister_scheduler_log_handler()` removes it.
- `registered_handler()` returns it.

### `rmfsched.scheduler_node`

`SchedulerNode.make_node(node, scheduler_factory, dynamic_charger_map=None,
fixed_charger_map=None)` fills a `SchedulerOptions` from these node
parameters:

- `tick_period`
- `allow_past_events_duration`
- `series_max_expandable_duration`
- `expand_series`
- `estimate_timeout`
- `enable_optimization`
- `optimization_window`
- `optimization_window_timezone`
- `enable_local_caching`
- `cache_dir`
- `cache_keep_last`

Missing parameters are declared with the defaults. `make_node` then passes
the options to `scheduler_factory`.

The node listens on `rmf_scheduler_api_requests` for JSON of the form
`{"type": ..., "payload": ...}`. It calls the matching scheduler method and
publishes the result on `rmf_scheduler_api_responses`:

| type | method |
| --- | --- |
| `add` | `handle_add_schedule` |
| `update` | `handle_update_schedule` |
| `update_event_time` | `handle_update_event_time` |
| `update_series` | `handle_update_series` |
| `get` | `handle_get_schedule` |
| `delete` | `handle_delete_schedule` |
| `pause` | `handle_pause` |
| `resume` | `handle_resume` |
| `cancel` | `handle_cancel` |
| `toggle_pause` | `handle_toggle_pause` |

How the result becomes the response text depends on the request type:

- The result of `get` is encoded with `json.dumps`.
- For every other type, the node uses the result's `json()` method if it
  has one, uses the result as it is if it is a string, and otherwise
  encodes it with `json.dumps`.

Request text that is not valid JSON gets an error response. Requests
without `type` or `payload`, or with an unknown type, are ignored.

### `rmfsched.plugin_nodes`

`BuilderNode`, `EstimateNode` and `RuntimeNode` are `PluginNode`s.
`make_node(scheduler_node, parameters=None)` creates a node named after
the scheduler's node with the suffix `_builder_client`, `_estimate_client`
or `_runtime_client`, on the same bus. Each parameter prefix `<name>`
describes one plugin through `<name>.type` and `<name>.supported_tasks`.
The plugin is loaded by calling the scheduler's
`load_builder_interface`, `load_estimate_interface` or
`load_runtime_interface`. `unload_interface(name)` calls the matching
`unload_*` method. A wrongly typed parameter raises
`InvalidParameterTypeError`.

### `rmfsched.scheduler_executor`

`SchedulerExecutor` collects nodes through `add_node` and
`add_scheduler_node`. `spin()` runs the scheduler's `spin` in a thread and
spins the buses of all added nodes until `shutdown()` is called. It then
calls the scheduler's `stop` and waits for the thread to end. It raises
`RuntimeError` if it is already spinning or if no scheduler node was
added.

## What the package does not do

- **No scheduler.** There is no schedule store, no event series or
  dependency graphs, no optimisation, and nothing that runs events at
  their times. `SchedulerNode`, the plugin nodes and `SchedulerExecutor`
  work with a scheduler object you supply. That object must provide the
  `handle_*`, `load_*_interface` / `unload_*_interface`, `spin` and `stop`
  methods named above.
- **No network transport.** Messages travel only over the in-process
  `MessageBus`.
- **No schema validation.** Task and estimate requests are not checked
  against JSON schemas beyond the field checks described above.
- **No command-line program.** Nodes, plugins and the executor are
  assembled in Python code.