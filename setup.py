import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

def read_requirements(filename):
    with open(filename, 'r', encoding='utf-8') as fh:
        lines = fh.readlines()
    # Remove comments and empty lines
    requirements = [line.strip() for line in lines if line.strip() and not line.startswith("#")]
    return requirements

setuptools.setup(
    name="batemanpy",
    version="1.0.0",
    description="Analytic decay chain solver for radionuclide inventories.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "test": ["pytest"],
    },
    packages=setuptools.find_packages(include=["batemanpy", "batemanpy.*"]),
    entry_points={
        "console_scripts": ["batemanpy=batemanpy.cli:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.9',
)
