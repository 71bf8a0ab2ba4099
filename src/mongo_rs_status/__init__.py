"""mongo-rs-status — MongoDB replica-set status probe and initiator.

Runs either as a one-shot command or as a small HTTP service that keeps a
single guarded connection to the cluster.
"""

from mongo_rs_status.version import __version__

__all__: list[str] = ["__version__"]
