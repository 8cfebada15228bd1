from setuptools import setup, find_packages

setup(
    name='vercel-source-downloader',
    version='0.1.0',
    description='Download source code from Vercel deployments',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.10',
    install_requires=[
        'aiohttp',
        'aiofiles',
        'rich',
        'platformdirs',
        'python-dotenv',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'vercel-source-downloader=vercel_source.cli:main',
        ],
    },
)
