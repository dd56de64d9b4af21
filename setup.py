#!/usr/bin/env python
import sys

import setuptools

if sys.version_info < (3, 11):
    sys.exit('Python < 3.11 is not supported')

install_requirements = [
    'pydantic>=2.7',
    'pydantic-settings>=2.5',
    'platformdirs',
    'requests',
    'typing_extensions',
]

test_requirements = [
    'pytest',
    'pytest-httpserver',
    'inline-snapshot',
    'werkzeug',
]


def main():
    setuptools.setup(
        name='foreman-provider',
        version='1.0.0',
        description='Client library for the Foreman datacenter management API',
        python_requires='>=3.11',
        install_requires=install_requirements,
        extras_require={
            'test': test_requirements,
        },
        packages=setuptools.find_packages(
            '.', include=('foreman_provider', 'foreman_provider.*')),
    )


if __name__ == '__main__':
    main()
