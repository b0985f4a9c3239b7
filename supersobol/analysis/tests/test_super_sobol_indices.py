import unittest
import numpy as np

from supersobol.analysis.super_sobol_indices import (
    SuperSobolIndices, SuperSobolResult, build_uncertainty_realization,
    assemble_pick_freeze_arguments, repeat_super_sobol_indices,
    run_super_sobol_sensitivity_analysis, plot_super_sobol_indices
)
from supersobol.expdesign.low_discrepancy_sequences import (
    RandomizedHaltonSequence
)
from supersobol.variables.inverse_transform import InverseTransformSampler
from supersobol.benchmarks.sensitivity_benchmarks import (
    additive_model, get_additive_model_super_sobol_indices,
    ishigami_model, get_ishigami_super_sobol_indices
)
from supersobol.util.exceptions import (
    ConfigurationError, InvalidParameterError, DegenerateVarianceError,
    NotComputedError
)


def sum_model(params, constants):
    return params[0]+params[1]


class TestPickFreeze(unittest.TestCase):
    def setUp(self):
        np.random.seed(1)

    def test_assemble_pick_freeze_arguments(self):
        s1, s2 = np.array([1., 2., 3.]), np.array([4., 5., 6.])
        arg1, arg2 = assemble_pick_freeze_arguments({1, 3}, s1, s2)
        assert np.array_equal(arg1, [1, 5, 3])
        assert np.array_equal(arg2, [4, 2, 6])

        arg1, arg2 = assemble_pick_freeze_arguments(set(), s1, s2)
        assert np.array_equal(arg1, s2)
        assert np.array_equal(arg2, s1)

        arg1, arg2 = assemble_pick_freeze_arguments({1, 2, 3}, s1, s2)
        assert np.array_equal(arg1, s1)
        assert np.array_equal(arg2, s2)

        # the inputs are not modified and the outputs do not alias them
        s1[0] = 10
        assert arg1[0] == 1
        assert np.array_equal(s2, [4, 5, 6])

    def test_build_uncertainty_realization(self):
        sequence = RandomizedHaltonSequence(4, False, False)
        sampler = InverseTransformSampler()
        sequence.next_point()
        s1, s2 = np.empty(2), np.empty(2)
        uncertainty_params = [[0, 1], [2, 4]]
        result = build_uncertainty_realization(
            sequence, sampler, uncertainty_params, ["uniform"]*2, s1, s2)
        assert result[0] is s1 and result[1] is s2
        assert np.allclose(s1, [1/2, 2+2*1/3])
        assert np.allclose(s2, [1/5, 2+2*1/7])

        # values from the previous iteration are overwritten
        sequence.next_point()
        build_uncertainty_realization(
            sequence, sampler, uncertainty_params, ["uniform"]*2, s1, s2)
        assert np.allclose(s1, [1/4, 2+2*2/3])
        assert np.allclose(s2, [2/5, 2+2*2/7])

    def test_build_uncertainty_realization_point_mass(self):
        sequence = RandomizedHaltonSequence(6, seed=3)
        sampler = InverseTransformSampler()
        sequence.next_point()
        s1, s2 = np.empty(3), np.empty(3)
        build_uncertainty_realization(
            sequence, sampler, [[1, 1], [-2, -2], [0, 1]],
            ["uniform"]*3, s1, s2)
        assert np.array_equal(s1[:2], [1, -2])
        assert np.array_equal(s2[:2], [1, -2])
        assert s1[2] != s2[2]

    def test_build_uncertainty_realization_invalid_parameters(self):
        sequence = RandomizedHaltonSequence(2, seed=3)
        sequence.next_point()
        self.assertRaises(
            InvalidParameterError, build_uncertainty_realization,
            sequence, InverseTransformSampler(), [[1, 0]], ["uniform"],
            np.empty(1), np.empty(1))


class TestSuperSobolIndices(unittest.TestCase):
    def setUp(self):
        np.random.seed(1)

    def test_additive_model(self):
        dim, nmc = 2, 100000
        uncertainty_params = [[0, 1], [0, 1]]
        estimator = SuperSobolIndices(
            sum_model, [], {1}, uncertainty_params, dim, nmc, seed=1)
        lower, total = estimator.run()
        assert lower == estimator.lower_super_index()
        assert total == estimator.total_super_index()
        true_lower, true_total = get_additive_model_super_sobol_indices(
            [1], [1, 1], uncertainty_params)
        assert np.allclose(true_lower, 0.5)
        assert abs(lower-true_lower) < 0.05
        assert abs(total-true_total) < 0.05
        assert np.allclose(estimator.mean(), 1, atol=1e-2)
        assert np.allclose(estimator.variance(), 1/6, atol=1e-2)
        assert estimator.accumulators["niterations"] == nmc

    def test_weighted_additive_model(self):
        dim, nmc = 3, 20000
        weights = [1, 2, 3]
        uncertainty_params = [[0, 1], [-1, 1], [2, 3]]
        for indices in [{2}, {1, 3}]:
            estimator = SuperSobolIndices(
                additive_model, weights, indices, uncertainty_params, dim,
                nmc, seed=2)
            lower, total = estimator.run()
            true_lower, true_total = get_additive_model_super_sobol_indices(
                indices, weights, uncertainty_params)
            assert abs(lower-true_lower) < 0.05
            assert abs(total-true_total) < 0.05

    def test_ishigami_model(self):
        dim, nmc = 3, 20000
        uncertainty_params = [[-np.pi, np.pi]]*dim
        for indices in [{1}, {2}, {1, 3}]:
            estimator = SuperSobolIndices(
                ishigami_model, [7, 0.1], indices, uncertainty_params, dim,
                nmc, seed=3)
            lower, total = estimator.run()
            true_lower, true_total = get_ishigami_super_sobol_indices(
                indices, 7, 0.1)
            assert abs(lower-true_lower) < 0.05
            assert abs(total-true_total) < 0.05
            assert lower <= total+0.05

    def test_model_independent_of_index_set(self):
        def model(params, constants):
            return params[1]+params[2]**2

        estimator = SuperSobolIndices(
            model, [], [1], [[0, 1]]*3, 3, 10000, seed=4)
        lower, total = estimator.run()
        assert abs(lower) < 0.05
        assert np.allclose(total, 0)

    def test_model_dependent_only_on_index_set(self):
        def model(params, constants):
            return params[0]*np.exp(params[1])

        estimator = SuperSobolIndices(
            model, [], [1, 2], [[0, 1], [0, 1], [0, 1]], 3, 10000, seed=5)
        lower, total = estimator.run()
        assert np.allclose(lower, 1)
        assert abs(total-1) < 0.05

    def test_empty_index_set_swaps_realizations(self):
        dim, nmc = 2, 5
        uncertainty_params = [[0, 1], [2, 3]]
        calls = []

        def model(params, constants):
            calls.append(np.array(params))
            return params.sum()

        estimator = SuperSobolIndices(
            model, [], set(), uncertainty_params, dim, nmc,
            random_start=False, random_permute=False)
        estimator.run()
        assert len(calls) == 3*nmc

        sequence = RandomizedHaltonSequence(2*dim, False, False)
        sampler = InverseTransformSampler()
        s1, s2 = np.empty(dim), np.empty(dim)
        for ii in range(nmc):
            sequence.next_point()
            build_uncertainty_realization(
                sequence, sampler, uncertainty_params, ["uniform"]*dim,
                s1, s2)
            assert np.array_equal(calls[3*ii], s1)
            # arg1 == s2 and arg2 == s1
            assert np.array_equal(calls[3*ii+1], s2)
            assert np.array_equal(calls[3*ii+2], s1)

    def test_constants_are_passed_to_model(self):
        constants = [3., 4.]

        def model(params, consts):
            assert np.array_equal(consts, constants)
            return consts[0]*params[0]+consts[1]*params[1]

        estimator = SuperSobolIndices(
            model, constants, [2], [[0, 1], [0, 1]], 2, 100, seed=1)
        estimator.run()

    def test_determinism(self):
        def run(**kwargs):
            trajectory = []
            estimator = SuperSobolIndices(
                ishigami_model, [7, 0.1], [1], [[-np.pi, np.pi]]*3, 3, 200,
                **kwargs)
            estimator.run(
                callback=lambda ii, acc: trajectory.append(acc))
            return trajectory, estimator

        trajectory1, estimator1 = run(
            random_start=False, random_permute=False)
        trajectory2, estimator2 = run(
            random_start=False, random_permute=False)
        assert len(trajectory1) == 200
        assert trajectory1 == trajectory2
        assert (estimator1.lower_super_index() ==
                estimator2.lower_super_index())
        assert (estimator1.total_super_index() ==
                estimator2.total_super_index())

        trajectory3, estimator3 = run(seed=7)
        trajectory4, estimator4 = run(seed=7)
        assert trajectory3 == trajectory4
        assert trajectory3 != trajectory1

    def test_model_with_large_mean(self):
        for offset in [1e4, 1e6, 1e7]:
            def model(params, constants):
                return offset+params[0]+params[1]

            estimator = SuperSobolIndices(
                model, [], {1}, [[0, 1], [0, 1]], 2, 20000, seed=1)
            lower, total = estimator.run()
            assert abs(lower-0.5) < 0.05
            assert abs(total-0.5) < 0.05
            assert np.allclose(estimator.mean(), offset+1, rtol=0, atol=1e-2)
            assert np.allclose(estimator.variance(), 1/6, atol=1e-2)
            assert estimator.accumulators["shift"] > offset

    def test_rerun_resets_accumulators(self):
        estimator = SuperSobolIndices(
            sum_model, [], [1], [[0, 1], [0, 1]], 2, 100, seed=1)
        estimator.run()
        estimator.run()
        assert estimator.accumulators["niterations"] == 100

    def test_degenerate_variance(self):
        estimator = SuperSobolIndices(
            sum_model, [], [1], [[0.3, 0.3], [2, 2]], 2, 1000, seed=1)
        self.assertRaises(DegenerateVarianceError, estimator.run)
        self.assertRaises(NotComputedError, estimator.lower_super_index)

        def constant_model(params, constants):
            return 1.

        estimator = SuperSobolIndices(
            constant_model, [], [1], [[0, 1], [0, 1]], 2, 100, seed=1)
        self.assertRaises(DegenerateVarianceError, estimator.run)

    def test_not_computed(self):
        estimator = SuperSobolIndices(
            sum_model, [], [1], [[0, 1], [0, 1]], 2, 10)
        self.assertRaises(NotComputedError, estimator.lower_super_index)
        self.assertRaises(NotComputedError, estimator.total_super_index)
        self.assertRaises(NotComputedError, estimator.mean)
        self.assertRaises(NotComputedError, estimator.variance)

    def test_invalid_parameter_is_raised_by_run(self):
        estimator = SuperSobolIndices(
            sum_model, [], [1], [[0, 1], [1, 0]], 2, 10)
        self.assertRaises(InvalidParameterError, estimator.run)

    def test_configuration_errors(self):
        params = [[0, 1], [0, 1]]
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1],
            [[0, 1]], 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [0],
            params, 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [3],
            params, 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1.5],
            params, 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], 1,
            params, 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], "1",
            params, 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1],
            params, 2, 0)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1],
            [], 0, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1],
            [[0, 1, 2], [0, 1]], 2, 10)
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1],
            params, 2, 10, families=["uniform"])
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, sum_model, [], [1],
            params, 2, 10, families=["uniform", "cauchy"])
        self.assertRaises(
            ConfigurationError, SuperSobolIndices, None, [], [1],
            params, 2, 10)

    def test_model_must_return_scalar(self):
        def model(params, constants):
            return params

        estimator = SuperSobolIndices(model, [], [1], [[0, 1]]*2, 2, 10)
        self.assertRaises(ConfigurationError, estimator.run)

    def test_other_uncertainty_families(self):
        dim, nmc = 2, 20000
        estimator = SuperSobolIndices(
            sum_model, [], [1], [[0, 1], [0, 1]], dim, nmc,
            families=["normal", "normal"], seed=1)
        lower, total = estimator.run()
        assert abs(lower-0.5) < 0.05
        assert abs(total-0.5) < 0.05


class TestRepeatedSuperSobolIndices(unittest.TestCase):
    def setUp(self):
        np.random.seed(1)

    def test_repeat_super_sobol_indices(self):
        nrealizations = 4
        result = repeat_super_sobol_indices(
            sum_model, [], [1], [[0, 1], [0, 1]], 2, 2000,
            nrealizations=nrealizations, seed=1)
        assert result["indices"] == [1]
        for name in ["lower_super_index", "total_super_index", "mean",
                     "variance"]:
            assert result[name]["values"].shape == (nrealizations,)
            for stat in ["mean", "median", "amin", "amax", "std",
                         "quantile-0.25", "quantile-0.75"]:
                assert stat in result[name]
        values = result["lower_super_index"]["values"]
        assert np.allclose(result["lower_super_index"]["mean"], values.mean())
        assert np.allclose(result["lower_super_index"]["amin"], values.min())
        assert abs(result["lower_super_index"]["mean"]-0.5) < 0.1
        # realizations use different randomizations
        assert np.unique(values).shape[0] == nrealizations

        self.assertRaises(
            ValueError, repeat_super_sobol_indices, sum_model, [], [1],
            [[0, 1], [0, 1]], 2, 10, 2, ["mode"])
        self.assertRaises(
            ConfigurationError, repeat_super_sobol_indices, sum_model, [],
            [1], [[0, 1], [0, 1]], 2, 10, 0)
        # without randomization all realizations would be identical
        self.assertRaises(
            ConfigurationError, repeat_super_sobol_indices, sum_model, [],
            [1], [[0, 1], [0, 1]], 2, 10, 2, random_start=False,
            random_permute=False)
        result = repeat_super_sobol_indices(
            sum_model, [], [1], [[0, 1], [0, 1]], 2, 500, 2,
            random_start=False, seed=1)
        assert np.unique(result["lower_super_index"]["values"]).shape[0] == 2

    def test_run_super_sobol_sensitivity_analysis(self):
        index_sets = [[1], [2], [1, 2]]
        result = run_super_sobol_sensitivity_analysis(
            additive_model, [1, 2], index_sets, [[0, 1], [0, 1]], 2, 5000,
            seed=2)
        assert isinstance(result, SuperSobolResult)
        assert result.lower_super_indices.shape == (3,)
        assert result.total_super_indices.shape == (3,)
        assert result.repeated is None
        assert result.index_sets == index_sets
        true_values = np.array([
            get_additive_model_super_sobol_indices(
                index_set, [1, 2], [[0, 1], [0, 1]])[0]
            for index_set in index_sets])
        assert np.allclose(result.lower_super_indices, true_values, atol=0.05)
        assert np.allclose(result.total_super_indices, true_values, atol=0.05)
        assert np.allclose(result.mean, 1.5, atol=1e-2)

        result = run_super_sobol_sensitivity_analysis(
            additive_model, [1, 2], index_sets, [[0, 1], [0, 1]], 2, 1000,
            nrealizations=3, seed=2)
        assert len(result.repeated) == 3
        assert np.allclose(
            result.lower_super_indices[0],
            result.repeated[0]["lower_super_index"]["mean"])

        self.assertRaises(
            ConfigurationError, run_super_sobol_sensitivity_analysis,
            additive_model, [], [], [[0, 1], [0, 1]], 2, 10)

    def test_plot_super_sobol_indices(self):
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        result = run_super_sobol_sensitivity_analysis(
            additive_model, [], [[1], [1, 2]], [[0, 1], [0, 1]], 2, 500,
            seed=1)
        bars, ax = plot_super_sobol_indices(result)
        assert len(bars) == 2
        assert len(bars[0]) == 2
        assert [tick.get_text() for tick in ax.get_xticklabels()] == [
            "$(z_{1})$", "$(z_{1},z_{2})$"]
        plt.close("all")


if __name__ == "__main__":
    pick_freeze_test_suite = unittest.TestLoader().loadTestsFromTestCase(
        TestPickFreeze)
    unittest.TextTestRunner(verbosity=2).run(pick_freeze_test_suite)
    super_sobol_test_suite = unittest.TestLoader().loadTestsFromTestCase(
        TestSuperSobolIndices)
    unittest.TextTestRunner(verbosity=2).run(super_sobol_test_suite)
    repeat_test_suite = unittest.TestLoader().loadTestsFromTestCase(
        TestRepeatedSuperSobolIndices)
    unittest.TextTestRunner(verbosity=2).run(repeat_test_suite)
