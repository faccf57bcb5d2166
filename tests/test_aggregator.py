"""Tests for grouping, ordering and instance expansion."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from core.domain.models import Instance
from core.errors import TransportError
from core.services.aggregator import aggregate, attach_instances, group_by_application


class TestGroupByApplication:
    def test_first_seen_order_and_member_order(self, make_deployment) -> None:
        a1 = make_deployment("api")
        w1 = make_deployment("web")
        a2 = make_deployment("api")

        groups = group_by_application([a1, w1, a2])

        assert [g.name for g in groups] == ["api", "web"]
        assert groups[0].deployments == [a1, a2]
        assert groups[1].deployments == [w1]

    def test_unnamed_deployments_share_an_empty_name_group(self, make_deployment) -> None:
        unnamed = make_deployment("", url="anon.example.app")

        groups = group_by_application([unnamed])

        assert groups[0].name == ""
        assert groups[0].deployments == [unnamed]


class TestAggregate:
    @pytest.mark.asyncio
    async def test_groups_sorted_by_most_recent_deployment(self, make_deployment) -> None:
        old = make_deployment("old", age=timedelta(days=3))
        fresh = make_deployment("fresh", age=timedelta(minutes=5))
        middle = make_deployment("middle", age=timedelta(hours=2))

        groups = await aggregate([old, fresh, middle])

        assert [g.name for g in groups] == ["fresh", "middle", "old"]

    @pytest.mark.asyncio
    async def test_members_are_not_resorted(self, make_deployment) -> None:
        older = make_deployment("api", age=timedelta(hours=5))
        newer = make_deployment("api", age=timedelta(hours=1))

        groups = await aggregate([older, newer])

        assert groups[0].deployments == [older, newer]

    @pytest.mark.asyncio
    async def test_custom_order_key(self, make_deployment) -> None:
        deployments = [make_deployment("b"), make_deployment("c"), make_deployment("a")]

        groups = await aggregate(deployments, order_key=lambda g: g.name)

        assert [g.name for g in groups] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_aggregation_is_idempotent(self, make_deployment) -> None:
        same_time = timedelta(hours=1)
        deployments = [
            make_deployment("zeta", age=same_time),
            make_deployment("alpha", age=same_time),
            make_deployment("zeta", age=timedelta(hours=3)),
            make_deployment("beta", age=None),
        ]

        first = await aggregate(deployments)
        second = await aggregate(deployments)

        assert [(g.name, [d.uid for d in g.deployments]) for g in first] == [
            (g.name, [d.uid for d in g.deployments]) for g in second
        ]
        assert [g.name for g in first] == ["alpha", "zeta", "beta"]

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        assert await aggregate([]) == []

    @pytest.mark.asyncio
    async def test_no_instance_calls_without_expansion(self, source: AsyncMock, make_deployment) -> None:
        await aggregate([make_deployment("api")], source=source)

        source.list_instances.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expansion_requires_a_source(self, make_deployment) -> None:
        with pytest.raises(ValueError):
            await aggregate([make_deployment("api")], expand_instances=True)


class TestInstanceExpansion:
    @pytest.mark.asyncio
    async def test_instances_attached_to_copies(self, source: AsyncMock, make_deployment) -> None:
        deployment = make_deployment("api", uid="dpl_1")
        source.list_instances.return_value = [Instance(url="api-1-a.example.app")]

        groups = await aggregate([deployment], expand_instances=True, source=source)

        expanded = groups[0].deployments[0]
        assert [i.url for i in expanded.instances] == ["api-1-a.example.app"]
        assert deployment.instances == []
        source.list_instances.assert_awaited_once_with("dpl_1")

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_others(self, source: AsyncMock, make_deployment) -> None:
        good = make_deployment("api", uid="dpl_good")
        bad = make_deployment("api", uid="dpl_bad")

        async def list_instances(uid: str) -> list[Instance]:
            if uid == "dpl_bad":
                raise TransportError("instances unavailable", status_code=500)
            return [Instance(url="good-1.example.app"), Instance(url="good-2.example.app")]

        source.list_instances.side_effect = list_instances

        expanded = await attach_instances(source, [good, bad])

        assert [len(d.instances) for d in expanded] == [2, 0]
        assert [d.uid for d in expanded] == ["dpl_good", "dpl_bad"]

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_isolated(self, source: AsyncMock, make_deployment) -> None:
        good = make_deployment("api", uid="dpl_good")
        bad = make_deployment("api", uid="dpl_bad")

        async def list_instances(uid: str) -> list[Instance]:
            if uid == "dpl_bad":
                raise ValueError("malformed instance payload")
            return [Instance(url="good-1.example.app")]

        source.list_instances.side_effect = list_instances

        groups = await aggregate([good, bad], expand_instances=True, source=source)

        assert [len(d.instances) for d in groups[0].deployments] == [1, 0]

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self, source: AsyncMock, make_deployment) -> None:
        started: list[str] = []
        release = asyncio.Event()

        async def list_instances(uid: str) -> list[Instance]:
            started.append(uid)
            if len(started) == 3:
                release.set()
            await release.wait()
            return []

        source.list_instances.side_effect = list_instances
        deployments = [make_deployment("api") for _ in range(3)]

        await asyncio.wait_for(attach_instances(source, deployments), timeout=1)

        assert sorted(started) == sorted(d.uid for d in deployments)
