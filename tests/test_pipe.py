"""Tests for the service pipe."""

import pytest

from mantle.service.hook import HookDefinition, service_hook
from mantle.service.pipe import service_pipe
from mantle.service.request import ServiceRequest
from mantle.service.response import ServiceResponseType, create_response


def tracing_hook(name: str, trace: list[str]) -> HookDefinition:
    async def before(request):
        trace.append(f"{name}.before")

    async def after(request, response):
        trace.append(f"{name}.after")

    async def error(request, response):
        trace.append(f"{name}.error")

    return HookDefinition(before=before, after=after, error=error, name=name)


class TestServicePipe:
    """Test hook composition order."""

    @pytest.mark.asyncio
    async def test_onion_order(self) -> None:
        trace: list[str] = []

        async def service(request):
            trace.append("service")
            return create_response(ServiceResponseType.SUCCESS)

        hooks = [service_hook(tracing_hook(n, trace)) for n in ("h1", "h2", "h3")]
        response = await service_pipe(hooks)(service)(ServiceRequest())

        assert response.success
        assert trace == ["h1.before", "h2.before", "h3.before", "service", "h3.after", "h2.after", "h1.after"]

    @pytest.mark.asyncio
    async def test_error_handlers_run_inside_out(self) -> None:
        trace: list[str] = []

        async def service(request):
            trace.append("service")
            raise RuntimeError("boom")

        hooks = [service_hook(tracing_hook(n, trace)) for n in ("h1", "h2")]
        response = await service_pipe(hooks)(service)(ServiceRequest())

        assert response.type is ServiceResponseType.ERROR
        assert trace == ["h1.before", "h2.before", "service", "h2.error", "h1.error"]

    @pytest.mark.asyncio
    async def test_empty_pipe_is_identity(self) -> None:
        async def service(request):
            return create_response(ServiceResponseType.SUCCESS, "plain")

        assert service_pipe([])(service) is service

    @pytest.mark.asyncio
    async def test_equivalent_to_nested_application(self) -> None:
        trace_piped: list[str] = []
        trace_nested: list[str] = []

        async def service(request):
            return create_response(ServiceResponseType.SUCCESS)

        piped = service_pipe([service_hook(tracing_hook(n, trace_piped)) for n in ("a", "b")])(service)
        h_a = service_hook(tracing_hook("a", trace_nested))
        h_b = service_hook(tracing_hook("b", trace_nested))
        nested = h_a(h_b(service))

        await piped(ServiceRequest())
        await nested(ServiceRequest())
        assert trace_piped == trace_nested

    @pytest.mark.asyncio
    async def test_outer_hook_sees_inner_request_error(self) -> None:
        trace: list[str] = []

        async def reject(request):
            request.error = "rejected"

        async def service(request):
            trace.append("service")
            return create_response(ServiceResponseType.SUCCESS)

        hooks = [service_hook(tracing_hook("outer", trace)), service_hook(HookDefinition(before=reject))]
        response = await service_pipe(hooks)(service)(ServiceRequest())

        assert response.type is ServiceResponseType.ERROR
        assert response.payload == "rejected"
        assert trace == ["outer.before", "outer.error"]

    @pytest.mark.asyncio
    async def test_get_service_scenario(self) -> None:
        """Three hooks decorate the request data and the response payload."""

        async def get_service(request):
            return create_response(ServiceResponseType.SUCCESS, f"{request.data} => <<svc>>")

        async def hook1_before(request):
            request.data = f"{request.data} => hook1 (param={request.get_param(['a', 'b'])})"
            return request

        async def hook1_after(request, response):
            return response.evolve(payload=f"{response.payload} => hook1")

        async def hook2_before(request):
            return ServiceRequest(data=f"{request.data} => hook2", params=request.params)

        async def hook2_after(request, response):
            return response.evolve(payload=f"{response.payload} => hook2")

        async def hook3_before(request):
            request.data = f"{request.data} => hook3"

        async def hook3_after(request, response):
            return response.evolve(payload=f"{response.payload} => hook3")

        pipe = service_pipe(
            [
                service_hook(HookDefinition(before=hook1_before, after=hook1_after)),
                service_hook(HookDefinition(before=hook2_before, after=hook2_after)),
                service_hook(HookDefinition(before=hook3_before, after=hook3_after)),
            ]
        )
        response = await pipe(get_service)(ServiceRequest(data="data", params={"a": {"b": "c"}}))

        assert response.type is ServiceResponseType.SUCCESS
        assert response.payload == "data => hook1 (param=c) => hook2 => hook3 => <<svc>> => hook3 => hook2 => hook1"
