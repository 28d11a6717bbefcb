from setuptools import setup, find_packages

setup(
    name='owotrack_server',
    version='0.1.0',
    description='UDP ingestion server for wireless orientation trackers',
    packages=find_packages(include=['owotrack_server', 'owotrack_server.*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'scipy',
        'loop-rate-limiters',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
