"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='tipsy-types',
	version='0.1.0',
	packages=['tipsy'],
	entry_points={
		'console_scripts': ["tipsy = tipsy.cmdline:main"],
	},
	license='MIT',
	description='Constraint-based type inference for the TIP teaching language',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Software Development :: Compilers",
		"Topic :: Education",
		"Environment :: Console",
    ],
	python_requires='>=3.9',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
)
