# urrtde

A pure-Python implementation of the Real-Time Data Exchange (RTDE) protocol
spoken by Universal Robots controllers on TCP port 30004.

The package covers the protocol path from bytes to a running connection:

- the wire format: package headers, package types and a byte reader
  (`urrtde.serialization`);
- the control packages exchanged during the handshake: protocol version
  negotiation, controller version query, output and input recipe setup,
  start and pause (`urrtde.packages`, `urrtde.setup_packages`,
  `urrtde.version`);
- data packages built from a recipe of named variables, with every variable
  type the controller knows about (`urrtde.recipe_types`,
  `urrtde.data_package`);
- a parser that turns one received package into a package object
  (`urrtde.parser`);
- the handshake rules and the client that drives a connection
  (`urrtde.handshake`, `urrtde.client`).

It has no runtime dependencies beyond the standard library. Errors in
parsing, building or exchanging packages are raised as
`urrtde.serialization.RTDEError`.

## Building requests

Every request is returned as `bytes`, header included, ready to be written
to a socket:

```python
from urrtde.packages import request_protocol_version, control_package_start_request
from urrtde.setup_packages import setup_outputs_request, setup_inputs_request

hello = request_protocol_version(2)
outputs = setup_outputs_request(["timestamp", "actual_q"], 500.0)
inputs = setup_inputs_request(["speed_slider_mask", "speed_slider_fraction"])
start = control_package_start_request()
```

`setup_outputs_request` without a frequency builds the protocol version 1
layout. An empty recipe gives an empty byte string.

## Data packages

A data package carries the values of the variables named in a recipe. Values
are looked up and set by name; `get_data` and `set_data` raise `KeyError` for
a field the package does not hold, and `set_data` raises `RTDEError` for a
value that does not fit the field's type.

```python
from urrtde.data_package import DataPackage

package = DataPackage(["speed_slider_mask"])
package.init_empty()
package.set_data("speed_slider_mask", 1)
package.recipe_id = 1
payload = package.serialize()
```

Integer fields such as `robot_status_bits` can be read as a list of booleans,
bit 0 first, with `get_bits(name, count)`. The enums `UrRtdeRobotStatusBits`
and `UrRtdeSafetyStatusBits` in `urrtde.client` name the individual bits, and
`RuntimeState` in `urrtde.data_package` names the values of `runtime_state`.
`urrtde.recipe_types.lookup_type` gives the `RTDEType` of any known variable.

## Parsing packages

`RTDEParser(recipe).parse(data)` turns one complete package into the matching
object: `DataPackage`, `RequestProtocolVersion`, `GetUrcontrolVersion`,
`ControlPackageSetupOutputs`, `ControlPackageSetupInputs`,
`ControlPackageStart`, `ControlPackagePause`, or a plain `RTDEPackage` holding
the raw payload for anything else, text messages included. Truncated input,
an unknown package type or bytes left over raise `RTDEError`.

## Controller versions

```python
from urrtde.version import VersionInformation

v = VersionInformation.from_string("5.12.1.1234")
assert v > VersionInformation.from_string("3.15.0")
```

`urrtde.handshake.max_frequency_for` gives the highest publishing rate a
controller of a given version supports (125 Hz before major version 5,
500 Hz from then on), and `resolve_target_frequency` turns a requested
frequency into the one used, zero meaning the maximum.

## The client

`RTDEClient(robot_ip, output_recipe_file, input_recipe_file, target_frequency)`
reads both recipes (one variable name per line) and, on `init()`, performs
the handshake: protocol negotiation, version query, output recipe setup
(adding `timestamp` if missing), a check that the controller has finished
booting, and input recipe setup. After that `start()` and `pause()` control
the data stream and `get_data_package(timeout)` returns the next
`DataPackage`, or `None` if none arrives within `timeout` seconds. The client
can be used as a context manager, which disconnects when the block is left.

## What the package does not do

The client sets up the input recipe and exposes the recipe id the robot
assigned as `input_recipe_id`, but it does not send input values to the robot:
there is no writer for speed slider, digital or analog outputs or input
registers. To send inputs, build a `DataPackage` on the input recipe, set its
`recipe_id` and write its `serialize()` output on the connection yourself.
Text messages from the robot are not decoded beyond their raw bytes.

## Running the tests

Install the `test` extra and run pytest from the project root.