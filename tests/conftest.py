from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import pytest


_logger = logging.getLogger(__name__)


SAMPLES_PATH: Path = Path(__file__).parent / "samples"


def _load_samples() -> Dict[str, str]:
    samples: Dict[str, str] = {}
    for sample_path in sorted(SAMPLES_PATH.glob("*.sdp")):
        with open(sample_path, "r", encoding="utf-8", newline="") as fp:
            samples[sample_path.stem] = fp.read()
    _logger.debug(f"Loaded {len(samples)} SDP samples from {SAMPLES_PATH}")
    return samples


SDP_SAMPLES: Dict[str, str] = _load_samples()


@pytest.fixture
def sdp_samples() -> Dict[str, str]:
    """All the SDP sample documents, by name, with ``\\n`` line endings."""
    return dict(SDP_SAMPLES)


@pytest.fixture(params=sorted(SDP_SAMPLES))
def sdp_sample(request) -> str:
    """Each one of the SDP sample documents, with ``\\n`` line endings."""
    return SDP_SAMPLES[request.param]


@pytest.fixture
def sdp_sample_crlf(sdp_sample) -> str:
    """Each one of the SDP sample documents, with ``\\r\\n`` line endings."""
    return sdp_sample.replace("\n", "\r\n")


@pytest.fixture
def rfc4566_sdp() -> str:
    """The example session description from RFC 4566 section 5."""
    return SDP_SAMPLES["rfc4566"]


@pytest.fixture
def chrome_offer_sdp() -> str:
    """A browser offer with bundled audio and video media descriptions."""
    return SDP_SAMPLES["chrome_offer"]


@pytest.fixture
def firefox_offer_sdp() -> str:
    """A browser offer with an audio and a data channel media description."""
    return SDP_SAMPLES["firefox_offer"]


@pytest.fixture
def all_fields_sdp() -> str:
    """A session description using every supported field type, at both levels."""
    return SDP_SAMPLES["all_fields"]
