from setuptools import setup, find_packages

setup(
   name='ternarygenus',
   version='1.0',
   description='Genera of positive-definite ternary quadratic forms and their Hecke matrices',
   author='Brandon Williams',
   author_email='btw@math.berkeley.edu',
   packages=find_packages(exclude=['tests', 'tests.*']),
   install_requires=['cypari2', 'numpy', 'passagemath-standard'],
   extras_require={
      'test': ['pytest'],
   },
)
