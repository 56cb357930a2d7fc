"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='partapp',
	version='0.1.0',
	packages=['partapp'],
	entry_points={
		'console_scripts': ["partapp = partapp.cmdline:main"],
	},
	license='MIT',
	description='Partially applicable functions whose arguments arrive as thunks, in any order',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Topic :: Software Development :: Code Generators",
		"Environment :: Console",
    ],
	python_requires='>=3.9',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
	extras_require={
		"test": ["mypy"],
	},
)
