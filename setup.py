from setuptools import setup, find_packages


with open("README.md", "r") as fh:
    long_description = fh.read()


setup(
    name='PyFITWriter',
    version='0.0.1',
    url='https://github.com/JoanPuig/PyFIT',
    license='Apache License 2.0',
    author='Joan Puig',
    author_email='joan.puig@gmail.com',
    description='PyFITWriter is a library that allows writing activity .FIT files from Python',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['FITWriter', 'FITWriter.*']),
    python_requires='>=3.7',
    install_requires=['numpy', 'pandas'],
    extras_require={'test': ['pytest']},
)
