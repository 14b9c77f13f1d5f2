import logging

from sharevote.errors import AlreadyApplied, NotAuthorized, Unauthorized

logger = logging.getLogger(__name__)


def apply_upgrade(ballot, upgrade_file, signer) -> bytes:
    """
    One-shot latch: release the upgrade content once the ballot has
    authorised it. Returns the content; what applying it means is up to
    the caller.
    """
    if not signer:
        raise Unauthorized("apply_upgrade requires a signer")
    if upgrade_file.file_id != ballot.upgrade_file:
        raise NotAuthorized(f"Upgrade file {upgrade_file.file_id} is not bound to ballot {ballot.ballot_id}")
    if not ballot.upgrade_occurred:
        raise NotAuthorized()
    if upgrade_file.applied:
        raise AlreadyApplied()

    upgrade_file.applied = True
    logger.info("[Upgrade] Ballot %s applied upgrade file %s (signer %s)",
                ballot.ballot_id, upgrade_file.file_id, signer)
    return upgrade_file.content
