"""Tests for the generator lifecycle: cache lookup, computation and saving."""

import builtins
import errno
from pathlib import Path

import numpy as np
import pytest
from randomfield.cache.codec import SpectralBasis, load_cache, save_cache
from randomfield.cache.key import encode_key
from randomfield.cache.policy import StrictCachePolicy
from randomfield.core.config import CachePolicyKind, GeneratorConfig, GridSpec
from randomfield.core.errors import (
    CacheCorruptError,
    CacheIOError,
    CacheMismatchError,
    GeneratorStateError,
)
from randomfield.generator import GeneratorState, UniformGridRandomFieldGenerator


def _failing_solver(matrix, k):
    raise AssertionError("solver must not run")


def _write_reference_cache(spec, root: Path) -> Path:
    path = root / encode_key(spec)
    path.parent.mkdir(parents=True)
    basis = SpectralBasis(
        eigenvalues=np.array([2.0, 1.0, 0.5]),
        eigenvectors=np.full((spec.total_grid_points, 3), 0.1),
    )
    save_cache(path, spec, basis)
    return path


def test_cache_miss_leaves_basis_empty(spec_2d, tmp_path: Path):
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path, solver=_failing_solver)

    assert gen.state is GeneratorState.CACHE_MISS
    assert gen.basis is None
    assert not gen.has_basis
    assert gen.cache_path == (tmp_path / encode_key(spec_2d)).resolve()
    assert not gen.cache_path.exists()


def test_cache_hit_bypasses_computation(spec_2d, tmp_path: Path):
    """A pre-existing cache file populates the generator without solving."""
    _write_reference_cache(spec_2d, tmp_path)

    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path, solver=_failing_solver)

    assert gen.state is GeneratorState.CACHE_HIT
    assert gen.spec == spec_2d
    np.testing.assert_array_equal(gen.basis.eigenvalues, [2.0, 1.0, 0.5])
    np.testing.assert_array_equal(gen.basis.eigenvectors, np.full((25, 3), 0.1))


def test_trust_policy_adopts_cached_header(spec_2d, tmp_path: Path):
    """A request differing below key resolution takes the cached values."""
    _write_reference_cache(spec_2d, tmp_path)
    requested = spec_2d.model_copy(update={"length_scale": 1.5004})

    gen = UniformGridRandomFieldGenerator(requested, tmp_path)

    assert gen.state is GeneratorState.CACHE_HIT
    assert gen.spec.length_scale == 1.5


def test_strict_policy_rejects_mismatch(spec_2d, tmp_path: Path):
    _write_reference_cache(spec_2d, tmp_path)
    requested = spec_2d.model_copy(update={"length_scale": 1.5004})

    with pytest.raises(CacheMismatchError, match="length_scale"):
        UniformGridRandomFieldGenerator(requested, tmp_path, policy=StrictCachePolicy())


def test_strict_policy_accepts_exact_match(spec_2d, tmp_path: Path):
    _write_reference_cache(spec_2d, tmp_path)
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path, policy=StrictCachePolicy())
    assert gen.state is GeneratorState.CACHE_HIT


def test_corrupt_cache_propagates(spec_2d, tmp_path: Path):
    """Construction fails instead of silently recomputing."""
    path = _write_reference_cache(spec_2d, tmp_path)
    path.write_bytes(path.read_bytes()[:100])

    with pytest.raises(CacheCorruptError):
        UniformGridRandomFieldGenerator(spec_2d, tmp_path)


def test_compute_save_then_reload(spec_2d, tmp_path: Path):
    """Computed basis is saved and picked up by a later generator."""
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    basis = gen.compute_spectral_basis()

    assert gen.state is GeneratorState.COMPUTED
    assert basis.eigenvalues.shape == (3,)
    assert basis.eigenvectors.shape == (25, 3)
    assert np.all(np.diff(basis.eigenvalues) <= 0.0)

    path = gen.save_to_cache()
    assert path == gen.cache_path and path.exists()

    again = UniformGridRandomFieldGenerator(spec_2d, tmp_path, solver=_failing_solver)
    assert again.state is GeneratorState.CACHE_HIT
    assert again.basis.eigenvalues.tobytes() == basis.eigenvalues.tobytes()
    np.testing.assert_array_equal(again.basis.eigenvectors, basis.eigenvectors)


def test_save_overwrites_existing_entry(spec_2d, tmp_path: Path):
    path = _write_reference_cache(spec_2d, tmp_path)
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    gen.compute_spectral_basis()
    gen.save_to_cache()

    _, basis = load_cache(path, 2)
    np.testing.assert_array_equal(basis.eigenvalues, gen.basis.eigenvalues)


def test_save_without_basis_fails(spec_2d, tmp_path: Path):
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    with pytest.raises(GeneratorStateError):
        gen.save_to_cache()
    with pytest.raises(GeneratorStateError):
        gen.sample_random_field()


def test_solver_shape_is_checked(spec_2d, tmp_path: Path):
    gen = UniformGridRandomFieldGenerator(
        spec_2d, tmp_path, solver=lambda m, k: (np.ones(k), np.ones((m.shape[0], k + 1)))
    )
    with pytest.raises(ValueError):
        gen.compute_spectral_basis()
    assert gen.basis is None


def test_squared_distance_reference(spec_2d, tmp_path: Path):
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    assert gen.squared_distance((0.5, 0.5), (9.5, 9.5)) == pytest.approx(82.0)


def test_sampling_is_reproducible_and_shaped(spec_2d, tmp_path: Path):
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    gen.compute_spectral_basis()

    a = gen.sample_random_field(np.random.default_rng(3))
    b = gen.sample_random_field(np.random.default_rng(3))
    np.testing.assert_array_equal(a, b)
    assert a.shape == (25,)
    assert gen.reshape_to_grid(a).shape == (5, 5)
    assert gen.reshape_to_grid(a)[1, 2] == a[1 + 5 * 2]


def test_sample_variance_matches_truncated_covariance(spec_1d, tmp_path: Path):
    """Empirical covariance converges to V diag(lambda) V^T."""
    gen = UniformGridRandomFieldGenerator(spec_1d, tmp_path)
    basis = gen.compute_spectral_basis()
    rng = np.random.default_rng(11)

    samples = np.stack([gen.sample_random_field(rng) for _ in range(4000)])
    expected = basis.eigenvectors @ np.diag(basis.eigenvalues) @ basis.eigenvectors.T
    empirical = samples.T @ samples / len(samples)

    np.testing.assert_allclose(empirical, expected, atol=0.15)


def test_interpolate_picks_nearest_point(spec_2d, tmp_path: Path):
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    field = np.arange(25, dtype=float)

    assert gen.interpolate(field, (0.0, 0.0)) == 0.0
    assert gen.interpolate(field, (2.1, 2.4)) == 6.0
    assert gen.interpolate(field, (9.5, 10.0)) == 20.0
    with pytest.raises(ValueError):
        gen.interpolate(np.zeros(24), (0.0, 0.0))


def test_from_config(spec_2d, tmp_path: Path):
    cfg = GeneratorConfig(grid=spec_2d, output_root=tmp_path, cache_policy=CachePolicyKind.STRICT)
    gen = UniformGridRandomFieldGenerator.from_config(cfg)

    assert isinstance(gen.policy, StrictCachePolicy)
    assert gen.output_root == tmp_path
    assert gen.state is GeneratorState.CACHE_MISS


def test_load_from_cache_marks_cache_hit(spec_2d, tmp_path: Path):
    """Loading explicitly after a miss moves the generator to CACHE_HIT."""
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    assert gen.state is GeneratorState.CACHE_MISS

    path = _write_reference_cache(spec_2d, tmp_path)
    gen.load_from_cache(path)

    assert gen.state is GeneratorState.CACHE_HIT
    np.testing.assert_array_equal(gen.basis.eigenvalues, [2.0, 1.0, 0.5])


def test_full_rank_basis_round_trip(tmp_path: Path):
    """Keeping every eigenpair of a tiny grid computes, saves and reloads."""
    spec = GridSpec(
        lower_corner=(0.0,),
        upper_corner=(1.0,),
        num_grid_pts=(4,),
        periodicity=(True,),
        num_eigenvalues=4,
        length_scale=0.5,
    )
    gen = UniformGridRandomFieldGenerator(spec, tmp_path)
    basis = gen.compute_spectral_basis()

    assert basis.eigenvalues.shape == (4,)
    assert basis.eigenvectors.shape == (4, 4)
    assert np.all(np.diff(basis.eigenvalues) <= 0.0)
    np.testing.assert_allclose(basis.eigenvalues.sum(), 4.0)
    np.testing.assert_allclose(basis.eigenvectors.T @ basis.eigenvectors, np.eye(4), atol=1e-10)

    gen.save_to_cache()
    again = UniformGridRandomFieldGenerator(spec, tmp_path, solver=_failing_solver)

    assert again.state is GeneratorState.CACHE_HIT
    assert again.basis.eigenvalues.tobytes() == basis.eigenvalues.tobytes()
    np.testing.assert_array_equal(again.basis.eigenvectors, basis.eigenvectors)


def test_failed_save_does_not_poison_cache(spec_2d, tmp_path: Path, monkeypatch):
    """After a write error the next generator misses cleanly instead of failing."""
    gen = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    gen.compute_spectral_basis()

    def _open(path, mode="r", *args, **kwargs):
        f = builtins.open(path, mode, *args, **kwargs)
        if "w" not in mode:
            return f
        f.close()
        raise OSError(errno.EFBIG, "File too large")

    monkeypatch.setattr("randomfield.cache.codec.open", _open, raising=False)
    with pytest.raises(CacheIOError):
        gen.save_to_cache()
    monkeypatch.undo()

    assert not gen.cache_path.exists()
    again = UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    assert again.state is GeneratorState.CACHE_MISS
