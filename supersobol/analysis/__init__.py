from supersobol.analysis.super_sobol_indices import (
    SuperSobolIndices, SuperSobolResult, build_uncertainty_realization,
    assemble_pick_freeze_arguments, repeat_super_sobol_indices,
    run_super_sobol_sensitivity_analysis, plot_super_sobol_indices
)


__all__ = ["SuperSobolIndices", "SuperSobolResult",
           "build_uncertainty_realization", "assemble_pick_freeze_arguments",
           "repeat_super_sobol_indices",
           "run_super_sobol_sensitivity_analysis", "plot_super_sobol_indices"]
