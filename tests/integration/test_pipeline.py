"""Integration tests for end-to-end generation, verification and replay."""

import numpy as np
import pytest

pytestmark = pytest.mark.integration


class TestGenerateVerifyRoundTrip:
    """Generate then verify for every whitening mode."""

    @pytest.mark.parametrize("whitening", ["raw", "lfsr", "drbg", "aes"])
    def test_Should_Verify_When_GeneratedAndReplayed(self, ledger, make_request, whitening):
        # Arrange
        from rng_chaos.pipeline import generate, reproduce_bits

        # Act
        result = generate(make_request(seed=1234, bit_count=1000, whitening=whitening), ledger)
        report = ledger.verify_transaction(result.transaction.id)

        # Assert
        assert report.verified
        assert np.array_equal(reproduce_bits(result.transaction), result.bits)
        assert result.transaction.provenance.whitening.value == whitening

    def test_Should_MatchKnownAnswer_When_ReferenceScenarioGenerated(self, ledger, make_request):
        """Seed 42, 3 points, 10 ticks, flow, 64 raw bits has fixed commitments."""
        # Arrange
        from rng_chaos.expand import bits_to_hex
        from rng_chaos.pipeline import generate

        # Act
        result = generate(make_request(seed=42, bit_count=64, whitening="raw"), ledger)
        tx = result.transaction

        # Assert
        assert tx.simulation_summary.path_digest == "91f9459bc5b8cf6a69992e2483360c66711fdd76db6b14b8d9601f05939f7533"
        assert tx.data_hash == "b77391a5d82717d2061d3cc4fe43b0afc4c89acb9dc9618845addc91291b3c3f"
        assert bits_to_hex(result.bits) == "99efcd459281a68e"
        assert tx.bits_hash == "cae6c13d7df0a5f0923eda826d55500c17b9b3aa6012a85051198ba7ae9f01c7"
        assert tx.published == "552a594651b6eee1c0d8d43ed0c5b6ba104e3cd5f3f606eb2cf8429ebb7ea6f5"
        assert result.block.data_hash == tx.published

    def test_Should_StayStable_When_ReferenceScenarioRepeated(self, make_request):
        """Seed 42, 3 points, 10 ticks, flow, 64 raw bits is identical across runs."""
        # Arrange
        from rng_chaos.ledger import Ledger
        from rng_chaos.pipeline import generate

        # Act
        first = generate(make_request(seed=42, bit_count=64, whitening="raw"), Ledger())
        second = generate(make_request(seed=42, bit_count=64, whitening="raw"), Ledger())

        # Assert
        assert first.bits.size == 64
        assert np.array_equal(first.bits, second.bits)
        assert first.transaction.data_hash == second.transaction.data_hash
        assert first.transaction.bits_hash == second.transaction.bits_hash
        assert first.transaction.published == second.transaction.published
        assert first.transaction.id != second.transaction.id

    def test_Should_RecordProvenance_When_Generated(self, ledger, make_request):
        from rng_chaos.pipeline import generate

        tx = generate(make_request(seed=-9), ledger).transaction

        assert tx.master_seed == -9
        assert tx.provenance.entropy_tag == "mode:repro seed=-9"
        assert tx.provenance.point_count == 3
        assert tx.provenance.iterations == 10
        assert tx.simulation_summary.point_count == 3
        assert tx.requested_bit_count == 64


class TestBitCountLimits:
    """Test bit count defaults and caps."""

    def test_Should_UseDefault_When_CountNegative(self, ledger, make_request, settings):
        from rng_chaos.pipeline import generate

        limited = settings.model_copy(update={"generation": settings.generation.model_copy(update={"bit_count": 40})})

        result = generate(make_request(bit_count=-1), ledger, settings=limited)

        assert result.bits.size == 40
        assert result.transaction.requested_bit_count == 40

    def test_Should_ClampCount_When_AboveMaximum(self, ledger, make_request, settings):
        from rng_chaos.pipeline import generate

        limited = settings.model_copy(update={"generation": settings.generation.model_copy(update={"max_bit_count": 100})})

        result = generate(make_request(bit_count=10_000), ledger, settings=limited)

        assert result.bits.size == 100

    def test_Should_ProduceEmptyStream_When_CountZero(self, ledger, make_request):
        from rng_chaos.pipeline import generate

        result = generate(make_request(bit_count=0), ledger)

        assert result.bits.size == 0
        assert ledger.verify_transaction(result.transaction.id).verified


class TestRemoteEntropyGeneration:
    """Generation with MIX entropy and mocked endpoints."""

    def test_Should_KeySubSeedsIntoReplay_When_MixUsed(self, ledger, make_request, mock_client):
        from rng_chaos.domain import EntropySpec
        from rng_chaos.pipeline import extract_replay, generate
        from rng_chaos.replay import ReplayGenerator

        client = mock_client({"https://int.test/": "99"})
        request = make_request(entropy=EntropySpec(mode="mix", urls=["https://int.test/"]))

        tx = generate(request, ledger, client=client).transaction

        assert tx.provenance.sub_seeds == [99]
        assert ledger.verify_transaction(tx.id).verified
        expected = ReplayGenerator.from_seeds(tx.master_seed, [99]).render(64)
        assert extract_replay(ledger, tx.id) == expected


class TestReadSide:
    """Replay hints, extraction and statistics hand-off."""

    def test_Should_RegenerateSameCommitments_When_ReplayHintFollowed(self, ledger, make_request):
        from rng_chaos.domain import EntropySpec, MotionSpec
        from rng_chaos.pipeline import GenerateRequest, generate, replay_hint

        tx = generate(make_request(seed=77, laws="sine,spiral", whitening="lfsr"), ledger).transaction

        hint = replay_hint(tx)
        again = generate(
            GenerateRequest(
                bit_count=hint["count"],
                canvas_w=hint["w"],
                canvas_h=hint["h"],
                iterations=hint["iter"],
                point_count=hint["points"],
                pixel_width=hint["px"],
                step=hint["step"],
                motion=MotionSpec(laws=hint["law"], sharpness=hint["sharp"], smoothness=hint["smooth"], speed_scale=hint["speed"]),
                entropy=EntropySpec(mode=hint["entropy"], seed64=hint["seed"]),
                whitening=hint["whiten"],
            ),
            ledger,
        ).transaction

        assert again.published == tx.published
        assert "seed=77" in hint["query"]
        assert "law=sine,spiral" in hint["query"]
        assert "whiten=lfsr" in hint["query"]

    def test_Should_DefaultToRecordedCount_When_ExtractingWithoutN(self, ledger, make_request):
        from rng_chaos.pipeline import extract_replay, generate

        tx = generate(make_request(bit_count=20), ledger).transaction

        assert len(extract_replay(ledger, tx.id, fmt="bin")) == 20
        assert len(extract_replay(ledger, tx.id, n_bits=9, fmt="raw")) == 2

    def test_Should_RaiseNotFound_When_ExtractingUnknownTx(self, ledger):
        from rng_chaos.exceptions import TransactionNotFoundError
        from rng_chaos.pipeline import extract_replay

        with pytest.raises(TransactionNotFoundError):
            extract_replay(ledger, "missing")

    @pytest.mark.parametrize("source", ["reproduce", "replay"])
    def test_Should_HandBitsToEngine_When_Analyzing(self, ledger, make_request, source):
        from dataclasses import dataclass

        from rng_chaos.pipeline import analyze_transaction, generate
        from rng_chaos.protocols import StatisticsEngine

        @dataclass
        class Outcome:
            p_value: float
            passed: bool

        class OnesFraction:
            significance = 0.01

            def __init__(self):
                self.seen = None

            def analyze(self, bits):
                self.seen = bits
                return {"ones": Outcome(p_value=float(bits.mean()), passed=True)}

        engine = OnesFraction()
        assert isinstance(engine, StatisticsEngine)
        tx = generate(make_request(bit_count=500), ledger).transaction

        outcomes = analyze_transaction(ledger, tx.id, engine, source=source)

        assert engine.seen.size == 500
        assert set(np.unique(engine.seen)).issubset({0, 1})
        assert "ones" in outcomes


class TestBatchGeneration:
    """Concurrent batch generation."""

    def test_Should_PreserveRequestOrder_When_GeneratingMany(self, ledger, make_request):
        from rng_chaos.pipeline import generate_many

        requests = [make_request(seed=s) for s in range(6)]

        results = generate_many(requests, ledger, max_workers=3)

        assert [r.transaction.master_seed for r in results] == list(range(6))
        assert len(ledger) == 6
        assert ledger.validate_chain()
        assert all(ledger.verify_transaction(r.transaction.id).verified for r in results)

    def test_Should_BuildRequestFromSettings_When_OverridesGiven(self, settings):
        from rng_chaos.domain import ALL_LAWS, EntropyMode, WhiteningMode
        from rng_chaos.pipeline import request_from_settings

        request = request_from_settings(settings, bit_count=16, whitening="raw")

        assert request.bit_count == 16
        assert request.whitening is WhiteningMode.RAW
        assert request.motion.laws == ALL_LAWS
        assert request.entropy.mode is EntropyMode.MIX
        assert request.iterations == 6000
