r"""
Super Sobol indices
-------------------
The Ishigami function

.. math:: f(z) = \sin(z_1)+a\sin^2(z_2) + bz_3^4\sin(z_1)

has a strong interaction between :math:`z_1` and :math:`z_3`. When each
parameter is uniform on :math:`[-\pi,\pi]` the lower and total Super Sobol
indices of any subset of the parameters are known analytically.
"""
import logging
import numpy as np
import matplotlib.pyplot as plt

from supersobol.analysis.super_sobol_indices import (
    run_super_sobol_sensitivity_analysis, plot_super_sobol_indices
)
from supersobol.benchmarks.sensitivity_benchmarks import (
    ishigami_model, get_ishigami_super_sobol_indices
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(message)s')

index_sets = [[1], [2], [3], [1, 3]]
result = run_super_sobol_sensitivity_analysis(
    ishigami_model, [7, 0.1], index_sets, [[-np.pi, np.pi]]*3, 3, 10000,
    nrealizations=5, seed=1)

#%%
#Compare the estimates with the exact values
for ii, index_set in enumerate(index_sets):
    print(index_set, result.lower_super_indices[ii],
          result.total_super_indices[ii],
          get_ishigami_super_sobol_indices(index_set))

bars, ax = plot_super_sobol_indices(result)
plt.show()
