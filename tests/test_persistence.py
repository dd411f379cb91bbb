"""
test_persistence.py
~~~~~~~~~~~~~~~~~~~

Unit tests for the binary network file format.
"""

import struct

import numpy as np
import pytest

from digitnet.matrix import Matrix
from digitnet.models.network import Network
from digitnet.persistence import (
    NetworkFormatError,
    decode_network,
    encode_network,
    encoded_size,
    load_network,
    save_network,
)


@pytest.fixture
def tiny_network():
    """A trained-looking [3, 2] network with awkward float values."""
    return Network([Matrix([[0.1, -2.5e-8, 1 / 3], [np.pi, -0.0, 1e300]])])


@pytest.mark.unit
class TestEncoding:
    """Byte layout of encoded networks."""

    def test_minimal_layout(self):
        payload = encode_network(Network([Matrix([[1.0]])]))
        assert payload == b"neural" + struct.pack(">III", 2, 1, 1) + struct.pack(">d", 1.0)

    def test_header_and_length(self, tiny_network):
        payload = encode_network(tiny_network)
        assert payload[:6] == b"neural"
        assert struct.unpack(">III", payload[6:18]) == (2, 3, 2)
        assert len(payload) == 6 + 4 + 4 * 2 + 8 * 6

    def test_weights_are_row_major(self):
        network = Network([Matrix([[1.0, 2.0], [3.0, 4.0]]), Matrix([[5.0, 6.0]])])
        payload = encode_network(network)
        body = struct.unpack(">6d", payload[6 + 4 + 4 * 3:])
        assert body == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)

    def test_encoded_size(self):
        network = Network.from_sizes(785, 101, 10, seed=1)
        assert len(encode_network(network)) == encoded_size([785, 101, 10])
        assert encoded_size([785, 101, 10]) == 10 + 12 + 8 * (785 * 101 + 101 * 10)


@pytest.mark.unit
class TestDecoding:
    """Round trips and corrupted payloads."""

    def test_round_trip_is_bit_identical(self, tiny_network):
        restored = decode_network(encode_network(tiny_network))
        assert restored.sizes == [3, 2]
        for original, loaded in zip(tiny_network.weights, restored.weights):
            assert original.to_numpy().tobytes() == loaded.to_numpy().tobytes()

    def test_round_trip_preserves_outputs(self):
        network = Network.from_sizes(3, 5, 2, seed=8)
        restored = decode_network(encode_network(network))
        data = Matrix([0.25, 0.75, 1.0])
        assert restored.feed_forward(data) == network.feed_forward(data)

    def test_bad_signature(self, tiny_network):
        payload = b"neuron" + encode_network(tiny_network)[6:]
        with pytest.raises(NetworkFormatError, match="signature"):
            decode_network(payload)

    def test_short_payload(self):
        with pytest.raises(NetworkFormatError):
            decode_network(b"neu")

    @pytest.mark.parametrize("cut", [12, 20, 65])
    def test_truncated_payload(self, tiny_network, cut):
        with pytest.raises(NetworkFormatError):
            decode_network(encode_network(tiny_network)[:cut])

    def test_trailing_bytes(self, tiny_network):
        with pytest.raises(NetworkFormatError, match="expected 66"):
            decode_network(encode_network(tiny_network) + b"\x00")

    def test_too_few_layers(self):
        with pytest.raises(NetworkFormatError, match="at least 2"):
            decode_network(b"neural" + struct.pack(">II", 1, 3))

    def test_empty_layer(self):
        with pytest.raises(NetworkFormatError, match="empty layer"):
            decode_network(b"neural" + struct.pack(">III", 2, 3, 0))

    def test_format_error_is_value_error(self):
        assert issubclass(NetworkFormatError, ValueError)

    def test_lenient_flag_is_applied(self, tiny_network):
        restored = decode_network(encode_network(tiny_network), strict=False)
        assert not restored.strict
        assert not restored.weights[0].strict


@pytest.mark.integration
class TestFiles:
    """Saving to and loading from disk."""

    def test_save_and_load(self, tmp_path, tiny_network):
        target = tmp_path / "runs" / "network"
        save_network(tiny_network, target)
        assert target.stat().st_size == 66
        restored = load_network(target)
        assert restored.weights == tiny_network.weights

    def test_load_uses_injected_generator(self, tmp_path, tiny_network):
        target = tmp_path / "network"
        save_network(tiny_network, target)
        rng = np.random.default_rng(3)
        assert load_network(target, rng=rng).rng is rng

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_network(tmp_path / "missing")

    def test_trained_network_round_trip(self, tmp_path, separable_points):
        network = Network.from_sizes(3, 4, 2, seed=1)
        network.train(separable_points(4), [], 2, 2, 1.0, 0.5)
        save_network(network, tmp_path / "network")
        restored = load_network(tmp_path / "network")
        data = Matrix([1.0, 1.0, 1.0])
        assert restored.feed_forward(data) == network.feed_forward(data)
