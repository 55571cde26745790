from setuptools import setup, find_packages

setup(
    name='s1border',
    version='0.1.0',
    description='Border noise removal of Sentinel-1 IW and EW Level-1 GRD products',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Information Technology',
        'Intended Audience :: Science/Research',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Information Analysis',
        'Topic :: Utilities'
    ],
    keywords='border noise removal sentinel GRD',
    author='Jeong-Won Park, Anton Korosov',
    author_email='jeong-won.park@nersc.no, anton.korosov@nersc.no',
    packages=find_packages(exclude=['tests', 'tests.*']),
    scripts=[
        's1border/scripts/s1_border_noise.py',
        ],
    python_requires='>=3.8',
    install_requires=[
        'beautifulsoup4',
        'lxml',
        'numpy',
    ],
    extras_require={
        'gdal': ['gdal'],
        'tests': ['pytest', 'scipy'],
    },
    include_package_data=True,
    zip_safe=False)
