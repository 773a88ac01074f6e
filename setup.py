from setuptools import setup, find_namespace_packages

setup(
    name='pyjobber',
    version='0.1.0',
    author='MG',
    python_requires='>=3.9',
    packages=find_namespace_packages(include=['pyjobber', 'pyjobber.*']),
    include_package_data=True,
    install_requires=[
        'Click>=8.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'pyjob = pyjobber.pyjob:jobber_cli',
        ],
    },
)
