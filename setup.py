#!/usr/bin/env python
""" A fluent builder for MongoDB queries, updates and aggregation pipelines """

from setuptools import setup, find_packages

setup(
    name='mongodsl',
    version='1.0.0',
    license='BSD',
    description=__doc__,
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    keywords=['mongodb', 'pymongo', 'query builder'],

    packages=find_packages(exclude=('tests',)),
    scripts=[],
    entry_points={},

    python_requires='>= 3.8',
    install_requires=[
        'pymongo >= 4.0',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
        ],
    },
    include_package_data=True,

    platforms='any',
    classifiers=[
        # https://pypi.python.org/pypi?%3Aaction=list_classifiers
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Database',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
)
