"""
qube-manager - quorum-coordinated upgrade and reboot daemon.

Trusted signers broadcast proposals for a network-wide action (an upgrade to
a version, or a reboot onto a new genesis). Every node tallies the distinct
signers currently endorsing each proposal and, once a configurable quorum is
reached, executes the highest-version proposal exactly once.

Operating rules:
- Only each signer's most recent signal counts
- An executed action never fires twice (History is durable)
- A failure in one source or one cycle never stops the daemon
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
