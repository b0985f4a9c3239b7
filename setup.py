import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()


setuptools.setup(
    name="supersobol",
    version="0.1.0",
    author="Super Sobol developers",
    description=("Monte Carlo estimation of Super Sobol sensitivity indices "
                 "with randomized Halton sequences"),
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["supersobol", "supersobol.*"]),
    python_requires='>=3.8',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        'numpy >= 1.17',
        'scipy >= 1.0.0',
        'numba',
        'matplotlib',
    ],
    extras_require={
        'test': ['pytest>=4.6', 'pytest-cov', 'coverage>=6.4'],
    },
    license='MIT',
)

# to run all tests use
# python -m unittest discover supersobol

# to run a single test with pytest use
# pytest supersobol/analysis/tests/test_super_sobol_indices.py -k test_additive_model

# to report coverage use
# pytest --cov=supersobol supersobol
