# propagarotas

A small discrete-event simulation of distributed least-cost routing.

Each router starts out knowing only itself (cost 0) and its direct
neighbours, where the cost of a link is its delay. A router marked as the
starter sends its routing table to every neighbour after a short random
delay (between 0 and 0.01 time units). Whenever a router learns of a new
destination or a cheaper path, it records the neighbour that offered it as
the next hop and sends its updated table to all its neighbours in turn.
Tables travel as `RoutingMessage` packets, which carry the sender's node
number and parallel arrays of destinations and costs. A router counts as
converged once its table holds eight destinations (`TOTAL_NODES`).

The package has no dependencies beyond the standard library.

## Modules

- `propagarotas.message`: `RoutingMessage`, the table-carrying packet
  (fields `name`, `kind`, `origin`, `destinations`, `costs`). The array
  fields, named in `ARRAY_FIELDS`, are edited with bounds-checked
  `resize`, `insert`, `append` and `erase`; `dup()` returns an independent
  copy and `table()` the destination-to-cost mapping. `pack()` gives a
  big-endian binary form that `unpack_message()` reads back. Bad indices,
  unknown fields, out-of-range integers and malformed packets raise
  `MessageError`.
- `propagarotas.descriptor`: `MessageDescriptor`, which gives reflective
  access to the fields `origin`, `destinations` and `costs` by index:
  `field_count`, `field_name`, `find_field`, `field_flags` (a `FieldFlag`),
  `field_type`, `array_size` and `set_array_size`, and values read and
  written either as typed values (`get_value`, `set_value`) or as strings
  (`get_value_as_string`, `set_value_from_string`).
- `propagarotas.router`: `Router`, `Network` and `RouterStatistics`, plus
  `extract_node_number`, which turns a node name such as `no3` into `3`
  and returns -1 for a name without a node number.

## Example

```python
from propagarotas.router import Network, extract_node_number

network = Network(seed=1)
for number in range(8):
    network.add_router(f"no{number}", number == 0)

network.connect("no0", "no1", 0.1)
network.connect("no1", "no2", 0.2)
network.connect("no2", "no3", 0.1)
network.connect("no3", "no4", 0.3)
network.connect("no4", "no5", 0.1)
network.connect("no5", "no6", 0.2)
network.connect("no6", "no7", 0.1)
network.connect("no7", "no0", 0.4)

handled = network.run(10.0)
statistics = network.finish()
print(statistics["no3"].converged, network.routers["no3"].routing_table)

assert extract_node_number("no5") == 5
```

`Network(seed)` seeds the random start delay. `Network.connect` joins two
routers with a link of the given delay in both directions; routers and
links can only be added before the first `run`. `Network.run` initializes
the routers on its first call, then processes scheduled events in time
order until the queue empties or the given time is reached, and returns
the number of events handled. `Network.finish` lets every router report
its final figures as `RouterStatistics`, keyed by router name: messages
sent and received, convergence time and whether it converged, the number
of known destinations, the last propagation phase and the final value of
the global clock. Each router's `routing_table`, `next_hops` and
`neighbor_costs` can be inspected directly.

Progress is reported through the standard `logging` module under the
logger `propagarotas.router`; configure logging to see it.

## What the package does not do

There is no command-line program and no reader for network description
or configuration files: topologies are built in Python with `Network`.
Results are returned as `RouterStatistics` objects and are not written
to any result file. The convergence threshold is fixed at eight
destinations.

## Working on the package

The tests use pytest and live in `tests/`. The `test` extra installs it.