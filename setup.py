# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="geopath",
    version="1.0.0",
    description="Hierarchical path identifiers, folder grouping and lazy tri-state geographic selection trees",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["geopath*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'geopath=geopath.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
