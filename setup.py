import re

from setuptools import setup

with open('src/bindkey/version.py', 'r') as fd:
    __version__ = re.search(r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]', fd.read(), re.MULTILINE).group(1)


install_requires = [
    "cryptography>=42.0",
    "pydantic>=2.5",
    "PyYAML>=6.0",
]

testing_extras = [
    "black",
    "coverage",
    "isort",
    "mypy",
    "pytest",
    "types-PyYAML",
]

setup(
    name="bindkey",
    version=__version__,
    description="Loader for DNSSEC private key files written by dnssec-keygen",
    classifiers=["Programming Language :: Python :: 3",],
    keywords="dnssec",
    packages=[
        "bindkey",
        "bindkey.common",
        "bindkey.misc",
        "bindkey.privkey",
        "bindkey.tools",
    ],
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    install_requires=install_requires,
    extras_require={"testing": testing_extras,},
    entry_points={
        "console_scripts": [
            "bindkey-keyinfo = bindkey.tools.keyinfo:main",
        ]
    },
)
