"""
Chaos 'actions' module.

This module contains the *action specs* of every fault family: the name,
aliases, descriptions, example and flag schema of each action, bound to the
executor that applies (create) or reverts (destroy) the fault.

*Actions* are destructive. Creating one introduces a fault on the target
(drop packets, burn cpu, kill a process) and leaves it in effect until the
matching destroy is issued for the same experiment uid. Destroy must be issued
with the same matcher values used on create so it reverts exactly the scope
that was affected.

Things to consider when adding or modifying *actions*:
1. The helper binary does the actual low-level work. The executor only checks
   the required tools are present, renders the helper's command line and
   hands it to the channel.
2. Action names and aliases must be unique within a registry. Flag names must
   be unique within an action.
3. Do not retry inside an executor. Faults are destructive; whether to retry
   is the caller's decision.
"""
from typing import List

from chaosaction.actions.network import network_action_specs
from chaosaction.spec import ActionSpec


def default_action_specs() -> List[ActionSpec]:
    """Every action spec shipped with chaosaction."""
    return network_action_specs()
