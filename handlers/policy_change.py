from datetime import timezone
from typing import Any, Dict, Tuple

from lib.errors import MalformedPayload
from lib.models import RawRecord


def _members(binding: Dict[str, Any]):
    # Policy JSON uses "members"; older AuditLog renderings carry "member".
    if "members" in binding:
        return binding["members"]
    return binding.get("member")


def parse(record: RawRecord) -> Tuple[int, Dict[str, int]]:
    """Decode one SetIamPolicy audit record into ``(timestamp, {role: member_count})``.

    The bindings are read from the policy returned in ``protoPayload.response``.
    Raises ``MalformedPayload`` when the payload does not have that shape.
    """
    pp = record.payload
    if not isinstance(pp, dict):
        raise MalformedPayload("protoPayload is not an object", record_id=record.insert_id)

    response = pp.get("response")
    if not isinstance(response, dict) or "bindings" not in response:
        raise MalformedPayload("policy response has no bindings field", record_id=record.insert_id)

    bindings = response["bindings"]
    if not isinstance(bindings, list):
        raise MalformedPayload("bindings is not a list", record_id=record.insert_id)

    membership: Dict[str, int] = {}
    for b in bindings:
        if not isinstance(b, dict):
            raise MalformedPayload("binding is not an object", record_id=record.insert_id)
        role = b.get("role")
        members = _members(b)
        if not isinstance(role, str) or not role:
            raise MalformedPayload("binding has no role", record_id=record.insert_id)
        if not isinstance(members, list):
            raise MalformedPayload(f"binding for {role} has no member list", record_id=record.insert_id)
        membership[role] = len(members)

    ts = record.timestamp
    if ts.tzinfo is None:
        # log timestamps are UTC; never read a naive value as host-local time
        ts = ts.replace(tzinfo=timezone.utc)
    return int(ts.timestamp()), membership
