from setuptools import setup, find_packages


# Taken from option 3 of https://packaging.python.org/guides/single-sourcing-package-version/
version = {}
with open('zipper/version.py') as fp:
    exec(fp.read(), version)

setup(
    name='zipper',
    version=version['__version__'],
    description='Streams the files behind a download token as a single zip archive',
    packages=find_packages(exclude=("tests*", )),
    package_dir={'zipper': 'zipper'},
    include_package_data=True,
    zip_safe=False,
    license='Apache-2.0',
    python_requires='>=3.9',
    install_requires=[
        'aiobotocore>=2.5',
        'aiohttp>=3.8',
        'botocore',
        'colorlog>=6.0',
        'redis>=5.0.1',
        'sentry-sdk>=1.14',
        'tornado>=6.2',
    ],
    extras_require={
        'test': [
            'flake8',
            'invoke',
            'pytest',
            'pytest-asyncio',
            'pytest-cov',
        ],
    },
    classifiers=[
        'Natural Language :: English',
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.13',
        'Development Status :: 4 - Beta',
    ],
    entry_points={
        'console_scripts': [
            'zipper = zipper.server.app:serve',
        ],
    },
)
