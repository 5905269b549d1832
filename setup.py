from setuptools import setup, find_packages

setup(
    name='gmail-filtergen',
    version='0.1.0',
    description='Generate Gmail filter XML from a declarative YAML rule configuration',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'pyyaml',
        'python-dotenv',
        'click',
        'lxml',
    ],
    extras_require={
        'dev': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'filtergen=filtergen.cli:main',
        ],
    },
)
