"""groupgraph — profiles organized into a policy-governed graph of groups."""

__version__ = "0.1.0"
