"""
chaosaction module

This module contains:
 - the response/error model, defaults and logging setup (common directory)
 - the declarative action spec, flag schema and run context (spec.py)
 - the helper-binary executor that applies and reverts faults (executor.py)
 - the precondition checker for required external tools (preconditions.py)
 - action specs for each fault family (actions directory)
 - channels that run helper binaries locally or over SSH (channel directory)
 - a registry and an in-memory dispatcher driving the create/destroy
   lifecycle (registry.py, dispatch.py)

An action is a destructive experiment: creating it injects a fault (drop
packets, burn cpu, kill a process) on the target, and it stays in effect until
it is destroyed. The hard part is not any single fault but the contract every
fault shares. Each executor must:
1. Fail fast, before anything is run on the target, when it has no channel or
   when a tool the fault depends on is missing.
2. Decide between create and destroy only from the run context.
3. Render the same helper command line for the same flag values, so that
   destroy affects exactly the scope create affected.
4. Hand the command to the channel and return the channel's Response as is.
   Executors never retry; faults are destructive and retrying blindly is
   unsafe.
"""
