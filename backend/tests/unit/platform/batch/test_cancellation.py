"""Tests for the cancellation token."""

import asyncio

import pytest

from spvm.platform.batch import CancellationToken


@pytest.mark.asyncio
async def test_sleep_elapses():
    """Test that an uncancelled sleep runs to completion."""
    token = CancellationToken()
    assert await token.sleep(0.01) is True
    assert token.is_cancelled is False


@pytest.mark.asyncio
async def test_sleep_wakes_on_cancel():
    """Test that cancelling wakes a long sleep early."""
    token = CancellationToken()

    async def cancel_soon():
        await asyncio.sleep(0.01)
        token.cancel()

    asyncio.create_task(cancel_soon())
    assert await asyncio.wait_for(token.sleep(30), timeout=5) is False


@pytest.mark.asyncio
async def test_sleep_after_cancel_returns_immediately():
    """Test that a cancelled token does not sleep at all."""
    token = CancellationToken()
    token.cancel()
    assert await token.sleep(30) is False
