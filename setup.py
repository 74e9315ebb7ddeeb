#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
#
# Wallet signatures (EIP-712, EIP-7702 style) and payment QR support library
#

import re

# package imports coincurve, which may not be installed yet
with open("walletsig/__init__.py", "r") as fh:
    __version__ = re.search(r"__version__ = '([^']+)'", fh.read()).group(1)

# To use this command to install and yet be able to edit the code (here). Great for dev:
#
#   pip install --editable .
#
# with cli dependencies
#
#   pip install --editable '.[cli]'
#
# with test dependencies
#
#   pip install --editable '.[test]'
#
#
from setuptools import setup

# these minimum versions are tested, some earlier values would probably work too.
requirements = [
    'coincurve>=15.0.1',
    'eth-hash[pycryptodome]>=0.3.2',
    'eth-account>=0.10.0',
    'eth-utils>=2.0.0',
]

cli_requirements = [
    'click>=8.0.3',
    'pyqrcode>=1.2.1',
    'pypng>=0.0.21',
]

test_requirements = [
    'pytest',
] + cli_requirements

# only for developers playing with other libraries - cross library comparisons
test_plus_requirements = [
    'rlp>=3.0.0',
] + test_requirements

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name='walletsig',
    version=__version__,
    packages=[ 'walletsig' ],
    python_requires='>=3.8.0',
    install_requires=requirements,
    extras_require={
        'cli': cli_requirements,
        'test': test_requirements,
        'test_plus': test_plus_requirements,
    },
    author='Coinkite Inc.',
    author_email='support@coinkite.com',
    description="Build, sign and verify Ethereum wallet signatures, and make payment QR codes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    entry_points='''
        [console_scripts]
        walletsig=walletsig.cli:main
    ''',
    classifiers=[
        'Operating System :: POSIX :: Linux',
        'Operating System :: Microsoft :: Windows',
        'Operating System :: MacOS :: MacOS X',
    ],
)
