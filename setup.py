#!/usr/bin/env python

# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from setuptools import (
    find_packages,
    setup,
)


PROJECT_NAME = 'bakeryclient'

# version 0.1.0
VERSION = (0, 1, 0)


def get_version():
    '''Return the bakery client version as a string.'''
    return '.'.join(map(str, VERSION))


with open('README.rst') as readme_file:
    readme = readme_file.read()

requirements = [
    'requests>=2.18.1,<3.0',
    'PyNaCl>=1.2.0,<2.0',
    'pymacaroons>=0.13.0,<1.0',
]

test_requirements = [
    'tox',
    'fixtures',
    'httmock>=1.2.5',
]

setup(
    name=PROJECT_NAME,
    version=get_version(),
    description='A Python client for services protected by macaroons, '
                'acquiring and discharging them over HTTP',
    long_description=readme,
    author="Juju UI Team",
    author_email='juju-gui@lists.ubuntu.com',
    packages=find_packages(),
    include_package_data=True,
    install_requires=requirements,
    extras_require={'test': test_requirements},
    python_requires='>=3.6',
    license="LGPL3",
    zip_safe=False,
    keywords='macaroon cookie discharge',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
    ],
    test_suite='bakeryclient.tests',
    tests_require=test_requirements,
)
