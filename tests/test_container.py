"""Tests for container wiring."""

import asyncio

from diet_tracker.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.adherence_service is not None
    assert container.snapshot_service.publisher is None
    assert container.user_settings_service.default_timezone == "UTC"
    asyncio.run(container.close_resources())


def test_build_container_with_snapshot_webhook(settings) -> None:
    container = build_container(
        settings.model_copy(
            update={"snapshot_webhook_url": "https://example.com/snapshot"}
        )
    )

    assert container.snapshot_service.publisher is not None
    asyncio.run(container.close_resources())
