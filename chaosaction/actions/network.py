from typing import List

from chaosaction.common import DEFAULT_CHAOS_DEBUG
from chaosaction.executor import HelperExecutor
from chaosaction.spec import (ActionSpec, Example, ExampleCommand, FlagSpec,
                              resolve_example, resolve_with_default)

DROP_NETWORK_BIN = "chaos_dropnetwork"

DROP_LONG_DESC = "Drop network data"

DROP_EXAMPLE = Example(
    introduction="In the experimental scenario of network shielding, 100% "
                 "packet loss on the same network will be followed by 100% "
                 "replacement of packet loss. The difference between the two "
                 "is that the underlying implementation mechanism is "
                 "different, and the network mask only supports ports, not "
                 "the entire network card, which has limitations. It is "
                 "recommended to replace this command with network packet "
                 "loss 100%",
    example_commands=(
        ExampleCommand(annotation="Experimental scenario of network shielding",
                       command="blade create network drop"),
        ExampleCommand(annotation="Block the traffic of local port 8080",
                       command="blade create network drop --local-port 8080"),
    )
)


def new_drop_action_spec(long_desc: str = "", example: Example = None,
                         debug: bool = DEFAULT_CHAOS_DEBUG,
                         bin_name: str = DROP_NETWORK_BIN) -> ActionSpec:
    """
    Build the network 'drop' action.

    Drops inbound packets on the local port and/or outbound packets to the
    remote port using iptables (through the chaos_dropnetwork helper).

    :param long_desc: Custom long description.
        Optional. (Default: "Drop network data")
    :type long_desc: str
    :param example: Custom example. Used only if at least one of its fields is
        set.
        Optional. (Default: chaosaction.actions.network.DROP_EXAMPLE)
    :type example: Example
    :param debug: Pass --debug=true to the helper.
        Optional. (Default: chaosaction.common.DEFAULT_CHAOS_DEBUG)
    :type debug: bool
    :param bin_name: Helper binary name under the channel's script path.
        Optional. (Default: chaos_dropnetwork)
    :type bin_name: str
    :return: ActionSpec
    """
    matchers = (
        FlagSpec(name="local-port", desc="Port for local service"),
        FlagSpec(name="remote-port", desc="Port for remote service"),
    )
    executor = HelperExecutor(
        name="drop",
        bin_name=bin_name,
        required_commands=["iptables"],
        arg_names=[m.name for m in matchers],
        debug=debug)
    return ActionSpec(
        name="drop",
        executor=executor,
        short_desc="Drop experiment",
        long_desc=resolve_with_default(long_desc, DROP_LONG_DESC),
        example=resolve_example(example, DROP_EXAMPLE),
        matchers=matchers,
        flags=())


def network_action_specs(debug: bool = DEFAULT_CHAOS_DEBUG) -> List[ActionSpec]:
    return [new_drop_action_spec(debug=debug)]
