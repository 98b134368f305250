from setuptools import setup, find_packages

setup(
    name="SimPower",
    version="0.1.0",
    packages=find_packages(include=["simpower", "simpower.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
    ],
    extras_require={
        "parallel": ["joblib>=1.3"],
        "progress": ["tqdm"],
        "test": ["pytest", "joblib>=1.3", "tqdm"],
    },
    author="Paweł Lenartowicz",
    description="Monte Carlo power estimation for two-sample tests and linear models",
)
