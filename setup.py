from setuptools import setup, find_packages

setup(
    name="pyrlsfiltering",
    packages=find_packages(
        include=["pyrlsfiltering", "pyrlsfiltering.*"]),
    version='0.1.0',
    description="Online Recursive Least-Squares adaptive filter with exponential forgetting.",
    author="Bruno Lima Netto",
    author_email="brunolimanetto@gmail.com",
    url="https://github.com/BruninLima",
    keywords=["Adaptive", "Filtering", "RLS", "Recursive", "Least", "Squares"],
    python_requires='>=3.8',
    install_requires=[
        'numpy',
    ],
    extras_require={
        'test': ['pytest', 'scipy'],
        'examples': ['matplotlib'],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Software Development :: Libraries',
        'Programming Language :: Python :: 3'
    ]

)
