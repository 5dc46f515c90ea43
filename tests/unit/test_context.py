"""
Engine Context Unit Tests
Tests for engine/context.py
"""
from dataclasses import fields
from datetime import timedelta

from core.config.runtime import RuntimeConfig
from core.wallet.simulated import SimulatedWallet
from engine.context import EngineContext, FrozenClock
from fixtures.common import START


class TestFrozenClock:

    def test_set_and_advance(self):
        clock = FrozenClock(START)
        assert clock.now() == START
        assert clock.advance(minutes=30) == START + timedelta(minutes=30)

        clock.set_time(START)
        assert clock.now() == START


class TestEngineContext:

    def test_create_test_wires_collaborators(self):
        ctx = EngineContext.create_test(frozen_time=START)

        assert isinstance(ctx.config, RuntimeConfig)
        assert isinstance(ctx.wallet, SimulatedWallet)
        assert isinstance(ctx.clock, FrozenClock)
        assert ctx.now() == START

    def test_only_carries_collaborators(self):
        assert [f.name for f in fields(EngineContext)] == ["config", "wallet", "clock"]
