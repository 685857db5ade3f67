from setuptools import setup, find_packages

setup(
    name='k3sctl',
    version='0.1.0',
    packages=find_packages(exclude=['*.tests', '*.tests.*', 'tests']),
    include_package_data=True,
    install_requires=[
        'typer',
        'python-dotenv',
        'pydantic>=2',
        'PyYAML',
        'kubernetes',
        'urllib3',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'k3sctl=k3sctl.cli:app'
        ]
    },
    description='Provision a multi-node k3s cluster with kube-vip, MetalLB and cert-manager for self-hosted Gitpod',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
