"""Tests for the request context carrier."""

import time
from dataclasses import FrozenInstanceError

import pytest

from mantle import RequestContext, RequestEnv


class TestRequestContext:
    def test_default_env(self) -> None:
        before = time.time()
        context = RequestContext(req={"path": "/users/1"})

        assert context.req == {"path": "/users/1"}
        assert before <= context.env.epoch <= time.time()
        assert context.env.variables == {}

    def test_variable(self) -> None:
        context = RequestContext(req=None, env=RequestEnv(epoch=1.0, variables={"tenant": "acme"}))
        assert context.variable("tenant") == "acme"
        assert context.variable("region") is None
        assert context.variable("region", "eu") == "eu"

    def test_is_frozen(self) -> None:
        context = RequestContext(req=None)
        with pytest.raises(FrozenInstanceError):
            context.req = "other"
        with pytest.raises(FrozenInstanceError):
            context.env.epoch = 0.0

    def test_exported_from_package(self) -> None:
        from mantle import server

        assert RequestContext is server.RequestContext
        assert RequestEnv is server.RequestEnv
