from setuptools import setup, find_packages

__author__ = 'The sediment authors'
__version__ = '0.1'
__license__ = 'BSD'



with open('requirements.txt') as f:
    requirements = f.read().splitlines()


setup(name='sediment',
      author=__author__,
      version=__version__,
      license=__license__,
      install_requires=requirements,
      extras_require={'tests': ['pytest']},
      entry_points={'console_scripts': ['sediment = sediment.server:main']},
      packages=find_packages(exclude=['sediment.tests']))
