from setuptools import setup, find_packages

setup(
    name="imeswitch",
    version="0.1.0",
    description="imeswitch: switches the input method between Chinese and English from the text around the cursor",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "PyQt5>=5.15",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "imeswitch=imeswitch.main:main",
        ],
    },
    package_data={
        "imeswitch": [
            "bin/*",
        ],
    },
    include_package_data=True,
)
