from setuptools import setup, find_packages

setup(
   name="rest-resource",
   version="1.0.0",
   package_dir={"": "src"},
   packages=find_packages(where="src"),
   include_package_data=True,
   python_requires=">=3.10",
   install_requires=[
      "fastapi",
      "starlette",
      "pydantic>=2",
      "PyYAML",
   ],
   extras_require={
      "test": ["pytest", "httpx"],
   },
)
