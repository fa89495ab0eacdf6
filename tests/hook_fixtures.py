"""Hooks imported by configuration tests."""

from mantle.service.hook import HookDefinition


async def _audit_before(request):
    request.params.setdefault("audited", True)


audit_hook = HookDefinition(before=_audit_before, name="audit")

mapping_hook = {"name": "mapping"}

not_a_hook = 42


def tag_hook(tag: str = "default") -> HookDefinition:
    """Factory returning a hook that tags successful payloads."""

    async def after(request, response):
        return response.evolve(payload={**response.payload, "tag": tag})

    return HookDefinition(after=after, name=f"tag:{tag}")
