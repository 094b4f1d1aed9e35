"""Execution and result-collection engine for script runs.

One invocation is strictly sequential: ingestion admits work items into the
store, the executor runs the script over them pass by pass, and the reporter
renders what each relationship received. All per-run state lives in a
``RunContext`` built by the controller; nothing here is module-global.
"""
