from setuptools import setup, find_packages

setup(
    name='formica',

    version='0.1.0',

    description='A python client for unit lifecycle and status operations on fleet clusters',

    url='https://github.com/giantswarm/formica',

    author='Giant Swarm',

    license='Apache License (2.0)',

    classifiers=[
        'Development Status :: 3 - Alpha',

        'Topic :: Software Development :: Libraries',
        'Topic :: System :: Distributed Computing',

        'Intended Audience :: Developers',

        'License :: OSI Approved :: Apache Software License',

        'Programming Language :: Python :: 3',
    ],

    keywords='coreos fleet v1 api client units orchestration',

    packages=find_packages(),

    package_data={
        'formica.fleet.tests': ['fixtures/*'],
    },

    python_requires='>=3.6',

    install_requires=[
        'google-api-python-client>=1.4.2',
        'httplib2',
        'paramiko>=1.15.1',
    ],

    extras_require={
        'test': [
            'mock',
            'pytest',
        ],
    },

    tests_require=[
        'mock',
    ],

    test_suite='formica'

)
