import numpy as np
import pytest

from akaze_features.exceptions import EngineError, SerializationError
from akaze_features.models.features import Features, Keypoint
from akaze_features.utils.keypoint_io import load_keypoints, save_keypoints


def make_features(count=5, dimension=61, binary=True):
    rng = np.random.RandomState(0)
    keypoints = [
        Keypoint(x=10.5 + i, y=20.25 * i, size=4.8 + 0.1 * i, angle=30.0 * i,
                 octave=i % 3, response=0.01 * i)
        for i in range(count)
    ]
    if binary:
        descriptors = rng.randint(0, 256, size=(count, dimension)).astype(np.uint8)
    else:
        descriptors = rng.rand(count, dimension).astype(np.float32)
    return Features(keypoints, descriptors)


class TestKeypointSerializer:
    """Test cases for the keypoint text format"""

    def test_header_matches_records(self, tmp_path):
        path = tmp_path / "kp.txt"
        save_keypoints(str(path), make_features(7, 61), binary=True)

        lines = path.read_text().splitlines()
        assert lines[0] == "7 61"
        assert len(lines) == 8
        assert all(len(line.split()) == 4 + 61 for line in lines[1:])

    def test_binary_payload_is_decimal_bytes(self, tmp_path):
        path = tmp_path / "kp.txt"
        features = make_features(2, 8)
        save_keypoints(str(path), features, binary=True)

        fields = path.read_text().splitlines()[1].split()
        assert [int(v) for v in fields[4:]] == features.descriptors[0].tolist()

    def test_binary_round_trip(self, tmp_path):
        path = tmp_path / "kp.txt"
        features = make_features(6, 61)
        save_keypoints(str(path), features, binary=True)

        loaded = load_keypoints(str(path))
        assert len(loaded) == 6 and loaded.dimension == 61
        assert loaded.descriptors.dtype == np.uint8
        np.testing.assert_array_equal(loaded.descriptors, features.descriptors)
        for original, restored in zip(features.keypoints, loaded.keypoints):
            assert restored.x == pytest.approx(original.x)
            assert restored.y == pytest.approx(original.y)
            assert restored.size == pytest.approx(original.size, rel=1e-6)
            assert restored.angle == pytest.approx(original.angle)

    def test_real_round_trip(self, tmp_path):
        path = tmp_path / "kp.txt"
        features = make_features(4, 64, binary=False)
        save_keypoints(str(path), features, binary=False)

        loaded = load_keypoints(str(path), binary=False)
        assert loaded.descriptors.dtype == np.float32
        np.testing.assert_allclose(loaded.descriptors, features.descriptors, rtol=1e-6)

    def test_output_is_deterministic(self, tmp_path):
        first, second = tmp_path / "a.txt", tmp_path / "b.txt"
        save_keypoints(str(first), make_features(), binary=True)
        save_keypoints(str(second), make_features(), binary=True)
        assert first.read_bytes() == second.read_bytes()

    def test_whole_number_real_payload(self, tmp_path):
        path = tmp_path / "kp.txt"
        features = Features([Keypoint(1.0, 2.0, 3.0, 0.0)], np.zeros((1, 64), dtype=np.float32))
        save_keypoints(str(path), features, binary=False)

        assert load_keypoints(str(path), binary=False).descriptors.dtype == np.float32
        # without the type, an all-integer payload reads as packed bytes
        assert load_keypoints(str(path)).descriptors.dtype == np.uint8

    def test_empty_features(self, tmp_path):
        path = tmp_path / "kp.txt"
        save_keypoints(str(path), Features([], np.empty((0, 61), dtype=np.uint8)), binary=True)
        assert path.read_text() == "0 61\n"
        assert len(load_keypoints(str(path))) == 0

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "kp.txt"
        save_keypoints(str(path), make_features(1), binary=True)
        assert path.exists()

    def test_unwritable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(SerializationError):
            save_keypoints(str(blocker / "kp.txt"), make_features(1), binary=True)

    def test_header_count_mismatch(self, tmp_path):
        path = tmp_path / "kp.txt"
        path.write_text("3 2\n1 2 3 4 5 6\n")
        with pytest.raises(SerializationError):
            load_keypoints(str(path))

    def test_record_length_mismatch(self, tmp_path):
        path = tmp_path / "kp.txt"
        path.write_text("1 3\n1 2 3 4 5 6\n")
        with pytest.raises(SerializationError):
            load_keypoints(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(SerializationError):
            load_keypoints(str(tmp_path / "missing.txt"))


class TestFeatures:

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(EngineError):
            Features([Keypoint(0, 0, 1)], np.zeros((2, 61), dtype=np.uint8))

    def test_descriptors_must_be_2d(self):
        with pytest.raises(EngineError):
            Features([], np.zeros(3))
