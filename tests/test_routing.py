"""
Tests for the semantic router and shortcut classifier.
"""
import math

import pytest

from routeflow.config import parse_routing_table
from routeflow.errors import ConfigurationError, InvalidVectorError
from routeflow.models import RouteLabel
from routeflow.routing import SemanticRouter, ShortcutClassifier


def _router(threshold=0.0):
    return SemanticRouter(
        {
            RouteLabel.BITCOIN: [[1.0, 0.0, 0.0]],
            RouteLabel.ZIPCODE: [[0.0, 1.0, 0.0], [0.0, 0.6, 0.8]],
            RouteLabel.FINANCE: [[0.0, 0.0, 1.0]],
        },
        dimension=3,
        default_route=RouteLabel.BITCOIN,
        threshold=threshold,
    )


# =============================================================================
# SemanticRouter
# =============================================================================


class TestSemanticRouter:
    def test_picks_closest_route(self):
        router = _router()
        assert router.route([0.1, 0.9, 0.0]) == RouteLabel.ZIPCODE
        assert router.route([0.0, 0.1, 0.9]) == RouteLabel.FINANCE

    def test_score_is_best_utterance(self):
        router = _router()
        scores = router.scores([0.0, 0.6, 0.8])

        # Exact match with the second zipcode utterance
        assert scores[RouteLabel.ZIPCODE] == pytest.approx(1.0)
        assert scores[RouteLabel.FINANCE] == pytest.approx(0.8)

    def test_magnitude_does_not_matter(self):
        router = _router()
        assert router.route([0.0, 0.0, 42.0]) == RouteLabel.FINANCE

    def test_tie_goes_to_first_declared_route(self):
        router = _router()
        # Equidistant from bitcoin and finance
        assert router.route([1.0, 0.0, 1.0]) == RouteLabel.BITCOIN

    def test_tie_break_is_stable(self):
        router = _router()
        results = {router.route([1.0, 0.0, 1.0]) for _ in range(20)}
        assert results == {RouteLabel.BITCOIN}

    def test_below_threshold_falls_back_to_default(self):
        router = _router(threshold=0.9)
        match = router.match([0.5, 1.0, 0.0])

        assert match.route == RouteLabel.BITCOIN
        assert match.fell_back is True
        assert match.matched == RouteLabel.ZIPCODE
        assert match.score == pytest.approx(2 / 5**0.5)

    def test_above_threshold_matches(self):
        router = _router(threshold=0.9)
        match = router.match([0.0, 1.0, 0.05])
        assert match.route == RouteLabel.ZIPCODE
        assert match.fell_back is False

    def test_negative_similarity_still_ranks(self):
        router = _router(threshold=-1.0)
        assert router.route([-1.0, -0.1, -1.0]) == RouteLabel.ZIPCODE

    @pytest.mark.parametrize(
        "vector",
        [
            [],
            [1.0, 0.0],
            [1.0, 0.0, 0.0, 0.0],
            [math.nan, 0.0, 1.0],
            [math.inf, 0.0, 1.0],
            [0.0, 0.0, 0.0],
        ],
    )
    def test_invalid_vectors(self, vector):
        with pytest.raises(InvalidVectorError):
            _router().route(vector)

    def test_dimension_error_carries_sizes(self):
        with pytest.raises(InvalidVectorError) as exc_info:
            _router().route([1.0, 0.0])
        assert exc_info.value.expected_dimension == 3
        assert exc_info.value.actual_dimension == 2

    def test_rejects_misdimensioned_references(self):
        with pytest.raises(InvalidVectorError):
            SemanticRouter({RouteLabel.BITCOIN: [[1.0, 0.0]]}, dimension=3)

    def test_rejects_non_positive_dimension(self):
        with pytest.raises(ConfigurationError):
            SemanticRouter({}, dimension=0)

    def test_no_routes_returns_default(self):
        router = SemanticRouter({}, dimension=2, default_route=RouteLabel.BITCOIN)
        assert router.route([1.0, 0.0]) == RouteLabel.BITCOIN


class TestSemanticRouterBuild:
    @pytest.mark.asyncio
    async def test_build_embeds_every_utterance_once(self, routing_table, embedder):
        router = await SemanticRouter.build(routing_table, embedder)

        expected = sum(len(texts) for texts in routing_table.utterances().values())
        assert len(embedder.calls) == expected
        assert router.dimension == embedder.dimension
        assert router.labels == routing_table.labels

    @pytest.mark.asyncio
    async def test_built_router_classifies_queries(self, routing_table, embedder, queries):
        router = await SemanticRouter.build(routing_table, embedder)

        for text, label in queries.items():
            assert router.route(await embedder.embed(text)) == label

    @pytest.mark.asyncio
    async def test_unknown_text_falls_back_to_default(self, routing_table, embedder):
        router = await SemanticRouter.build(routing_table, embedder)
        vector = await embedder.embed("Tell me a joke")
        assert router.route(vector) == RouteLabel.BITCOIN

    @pytest.mark.asyncio
    async def test_build_rejects_short_batch(self, routing_table, embedder):
        async def short_batch(texts):
            return []

        embedder.embed_batch = short_batch
        with pytest.raises(InvalidVectorError):
            await SemanticRouter.build(routing_table, embedder)


# =============================================================================
# ShortcutClassifier
# =============================================================================


class TestShortcutClassifier:
    def test_matches_image_phrase(self, routing_table):
        shortcuts = ShortcutClassifier.from_table(routing_table)
        assert shortcuts.match("make an image of a cat on the moon") == RouteLabel.MAKE_AN_IMAGE_OF

    def test_phrase_anywhere_in_input(self, routing_table):
        shortcuts = ShortcutClassifier.from_table(routing_table)
        assert shortcuts.match("please make an image of bitcoin") == RouteLabel.MAKE_AN_IMAGE_OF

    def test_case_sensitive(self, routing_table):
        shortcuts = ShortcutClassifier.from_table(routing_table)
        assert shortcuts.match("Make An Image Of a cat") is None

    def test_no_match(self, routing_table):
        shortcuts = ShortcutClassifier.from_table(routing_table)
        assert shortcuts.match("What's the bitcoin price today?") is None

    def test_first_rule_wins(self):
        table = parse_routing_table(
            {
                "version": 1,
                "routes": [{"label": "bitcoin"}],
                "shortcuts": [
                    {"phrase": "zip", "route": "zipcode"},
                    {"phrase": "zipcode", "route": "finance"},
                ],
            }
        )
        shortcuts = ShortcutClassifier.from_table(table)
        assert shortcuts.match("zipcode 90210") == RouteLabel.ZIPCODE
        assert len(shortcuts) == 2
