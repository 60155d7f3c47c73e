import nox.sessions

PYTHON_VERSIONS = ['3.8', '3.9', '3.10', '3.11', '3.12']
PYMONGO_VERSIONS = [
    *(f'4.{x}' for x in range(0, 1 + 10)),
]


nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = [
    'tests',
    'tests_pymongo',
]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.sessions.Session, pymongo=None):
    """ Run all tests """
    session.install('-e', '.[test]')

    # Specific package versions
    if pymongo:
        session.install(f'pymongo=={pymongo}.*')

    # Test
    session.run('pytest', 'tests/', '--cov=mongodsl')


@nox.session(python=PYTHON_VERSIONS[-1])
@nox.parametrize('pymongo', PYMONGO_VERSIONS)
def tests_pymongo(session: nox.sessions.Session, pymongo):
    """ Test against a specific PyMongo version """
    tests(session, pymongo)
