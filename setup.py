import setuptools

setuptools.setup(
    name = 'clothoids',
    version = '1.0',
    description = 'clothoid fitting, bounding and intersection tools',
    packages = setuptools.find_packages(exclude=['tests']),
    install_requires=['numpy', 'scipy'],
    extras_require={'test': ['pytest']},
)
