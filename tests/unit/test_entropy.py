"""Unit tests for seed derivation.

Remote endpoints are simulated with httpx.MockTransport; no test touches
the network.
"""

import hashlib

import httpx
import pytest

pytestmark = pytest.mark.unit

HEX_SEED = "0102030405060708" + "00" * 24


class TestReproMode:
    """Test deterministic seed replay."""

    @pytest.mark.parametrize("seed", [0, 1, -1, 42, -(2**63), 2**63 - 1])
    def test_Should_ReturnSeedVerbatim_When_ReproModeRequested(self, seed):
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        derivation = derive_seed(EntropySpec.reproduce(seed))

        assert derivation.seed == seed
        assert derivation.tag == f"mode:repro seed={seed}"
        assert derivation.sub_seeds == []

    def test_Should_RejectSeed_When_OutsideInt64(self):
        from pydantic import ValidationError

        from rng_chaos.domain import EntropySpec

        with pytest.raises(ValidationError):
            EntropySpec.reproduce(2**63)


class TestLocalSources:
    """Test OS and jitter sources."""

    def test_Should_ReturnRequestedLength_When_OsBytesRead(self):
        from rng_chaos.entropy import raw_from_os

        assert len(raw_from_os(32)) == 32

    def test_Should_ReturnDigest_When_JitterSampled(self):
        """Jitter always yields a 32-byte digest, even with zero rounds."""
        from rng_chaos.entropy import raw_from_jitter

        assert len(raw_from_jitter(4)) == 32
        assert len(raw_from_jitter(0)) == 32

    @pytest.mark.parametrize("mode,tag", [("os", "mode:os"), ("jitter", "mode:jitter")])
    def test_Should_TagSource_When_LocalModeUsed(self, mode, tag):
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        derivation = derive_seed(EntropySpec(mode=mode), jitter_rounds=4)

        assert derivation.tag == tag
        assert -(2**63) <= derivation.seed < 2**63


class TestFetchClassification:
    """Test interpretation of remote responses."""

    def test_Should_DecodeHex_When_BodyIs64HexChars(self, mock_client):
        from rng_chaos.entropy import fetch_entropy

        client = mock_client({"https://a.test/": HEX_SEED + "\n"})

        outcome = fetch_entropy("https://a.test/", client)

        assert outcome.kind == "hex"
        assert outcome.material == bytes.fromhex(HEX_SEED)
        assert outcome.direct

    def test_Should_DecodeInteger_When_BodyIsDecimal(self, mock_client):
        from rng_chaos.entropy import fetch_entropy
        from rng_chaos.utils import int64_to_le

        client = mock_client({"https://a.test/": "-12345"})

        outcome = fetch_entropy("https://a.test/", client)

        assert outcome.kind == "int"
        assert outcome.material == int64_to_le(-12345)

    def test_Should_HashText_When_BodyIsFreeForm(self, mock_client):
        from rng_chaos.entropy import fetch_entropy

        client = mock_client({"https://a.test/": "  hello entropy  "})

        outcome = fetch_entropy("https://a.test/", client)

        assert outcome.kind == "text"
        assert outcome.material == hashlib.sha256(b"hello entropy").digest()
        assert not outcome.direct

    def test_Should_UseHeaders_When_BodyEmpty(self, mock_client):
        from rng_chaos.entropy import fetch_entropy

        client = mock_client({"https://a.test/": httpx.Response(204, headers={"x-nonce": "abc"})})

        outcome = fetch_entropy("https://a.test/", client)

        assert outcome.kind == "headers"
        assert b"https://a.test/" in outcome.material
        assert b"abc" in outcome.material

    def test_Should_ReturnErrorOutcome_When_TransportFails(self, mock_client):
        """Transport failures are values, never exceptions."""
        from rng_chaos.entropy import fetch_entropy

        client = mock_client({})

        outcome = fetch_entropy("https://down.test/", client)

        assert outcome.failed
        assert outcome.material == b""
        assert outcome.error

    @pytest.mark.parametrize("url", ["http://[::1", "not a url", "http://exa mple.com/"])
    def test_Should_ReturnErrorOutcome_When_UrlMalformed(self, mock_client, url):
        from rng_chaos.entropy import fetch_entropy

        outcome = fetch_entropy(url, mock_client({}))

        assert outcome.failed
        assert outcome.error

    @pytest.mark.parametrize("url", ["http://[::1", "not a url", "http://exa mple.com/"])
    def test_Should_DegradeMixSeed_When_UrlMalformed(self, mock_client, url):
        """A malformed URL costs its material but never aborts derivation."""
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        derivation = derive_seed(EntropySpec(mode="mix", urls=[url]), client=mock_client({}), mix_jitter_rounds=2)

        assert derivation.degraded == 1
        assert derivation.tag.endswith(" degraded=1")
        assert -(2**63) <= derivation.seed < 2**63


class TestHttpMode:
    """Test HTTP-mode derivation."""

    def test_Should_UseFirstDirectHit_When_HexAvailable(self, mock_client):
        """The first hex response short-circuits later URLs."""
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed, urls_fingerprint

        urls = ["https://text.test/", "https://hex.test/", "https://never.test/"]
        client = mock_client({"https://text.test/": "words", "https://hex.test/": HEX_SEED})

        derivation = derive_seed(EntropySpec(mode="http", urls=urls), client=client)

        assert derivation.seed == int.from_bytes(bytes.fromhex(HEX_SEED)[:8], "little", signed=True)
        assert derivation.tag == f"mode:http:{urls_fingerprint(urls)}"
        assert [f.url for f in derivation.fetches] == urls[:2]

    def test_Should_MarkDegraded_When_SomeFetchesFail(self, mock_client, caplog):
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        urls = ["https://down.test/", "https://text.test/"]
        client = mock_client({"https://text.test/": "words"})

        derivation = derive_seed(EntropySpec(mode="http", urls=urls), client=client)

        assert derivation.tag.endswith(" degraded=1")
        assert derivation.degraded == 1
        assert any("failed" in r.getMessage() for r in caplog.records)

    def test_Should_BeDeterministic_When_OnlyTextSources(self, mock_client):
        """Text-only material is hashed, so the seed is stable across calls."""
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        spec = EntropySpec(mode="http", urls=["https://text.test/"])
        first = derive_seed(spec, client=mock_client({"https://text.test/": "words"}))
        second = derive_seed(spec, client=mock_client({"https://text.test/": "words"}))

        assert first.seed == second.seed

    def test_Should_SkipBlankUrls_When_ListHasEmptyEntries(self, mock_client):
        from rng_chaos.entropy import raw_from_http

        client = mock_client({"https://hex.test/": HEX_SEED})

        material, outcomes = raw_from_http(["", "   ", "https://hex.test/"], client=client)

        assert material == bytes.fromhex(HEX_SEED)
        assert len(outcomes) == 1


class TestMixMode:
    """Test MIX-mode derivation and sub-seeds."""

    def test_Should_RecordSubSeedPerUrl_When_MixWithUrls(self, mock_client):
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        urls = ["https://int.test/", "https://hex.test/"]
        client = mock_client({"https://int.test/": "7", "https://hex.test/": HEX_SEED})

        derivation = derive_seed(EntropySpec(mode="mix", urls=urls), client=client, mix_jitter_rounds=4)

        expected_hex_seed = int.from_bytes(bytes.fromhex(HEX_SEED)[:8], "little", signed=True)
        assert derivation.sub_seeds == [7, expected_hex_seed]
        assert derivation.tag.startswith("mode:mix http=")
        assert f"per_seeds=7,{expected_hex_seed}" in derivation.tag

    def test_Should_SkipSubSeed_When_MixUrlBlank(self, mock_client):
        """Blank entries are dropped, so only real URLs contribute sub-seeds."""
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        client = mock_client({"https://int.test/": "7"})

        derivation = derive_seed(EntropySpec(mode="mix", urls=["", "https://int.test/", "  "]), client=client, mix_jitter_rounds=2)

        assert derivation.sub_seeds == [7]
        assert len(derivation.fetches) == 1

    def test_Should_ProduceFreshSeeds_When_MixWithoutUrls(self):
        """Mixed OS and jitter material gives a different seed each call."""
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        spec = EntropySpec()
        seeds = {derive_seed(spec, mix_jitter_rounds=2).seed for _ in range(3)}

        assert len(seeds) == 3
        assert derive_seed(spec, mix_jitter_rounds=2).sub_seeds == []

    def test_Should_StillDeriveSeed_When_AllRemotesFail(self, mock_client):
        """Remote failures degrade the tag but never abort derivation."""
        from rng_chaos.domain import EntropySpec
        from rng_chaos.entropy import derive_seed

        client = mock_client({})
        derivation = derive_seed(EntropySpec(mode="mix", urls=["https://down.test/"]), client=client, mix_jitter_rounds=2)

        assert "degraded=1" in derivation.tag
        assert len(derivation.sub_seeds) == 1
