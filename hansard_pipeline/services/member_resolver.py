"""
Member resolution against the registry.

Responsibility: Batch-resolve member ids to canonical identities
"""

import logging
from typing import Dict, Iterable

from ..models import MemberRecord
from ..parsing import normalize_affiliation
from .contracts import MemberRegistry

logger = logging.getLogger(__name__)


class MemberResolver:
    """
    Resolves member ids to :class:`MemberRecord` with one registry query
    per call.

    A registry failure is logged and treated as "nothing resolved" so the
    caller's entries simply stay unattributed.
    """

    def __init__(self, registry: MemberRegistry):
        self.registry = registry

    async def resolve_members(self, member_ids: Iterable[int]) -> Dict[int, MemberRecord]:
        wanted = sorted(set(member_ids))
        if not wanted:
            return {}

        try:
            members = await self.registry.query_members_by_id(wanted)
        except Exception as e:
            logger.error(f"Error fetching member details: {e}")
            return {}

        wanted_set = set(wanted)
        resolved: Dict[int, MemberRecord] = {}
        for member in members:
            if member.member_id not in wanted_set:
                continue
            resolved[member.member_id] = member.model_copy(
                update={"affiliation": normalize_affiliation(member.affiliation)}
            )

        logger.debug("Resolved %s of %s members", len(resolved), len(wanted))
        return resolved
