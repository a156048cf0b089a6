from setuptools import setup, find_packages

setup(
    name             = 'inbox-core',
    version          = '1.0.0',
    description      = 'Inbox engine — message search, FAQ library, batch actions and priority list',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest', 'httpx'],
    },
    entry_points     = {
        'console_scripts': [
            'inbox     = inbox.cli:main',
            'inbox-api = inbox.api:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
