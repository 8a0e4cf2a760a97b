from invoke import task


@task
def install(ctx, develop=False, pty=True):
    extras = '.[test]' if develop else '.'
    ctx.run(f'pip install -e {extras}', pty=pty)


@task
def flake(ctx):
    ctx.run('flake8 .', pty=True)


@task
def test(ctx, verbose=False, nocov=False, path=None):
    """Run full or customized tests for zipper.

    :param ctx: the ``invoke`` context
    :param verbose: the flag to increase verbosity
    :param nocov: the flag to disable coverage
    :param path: limit the tests to the given path only

    :return: None
    """

    flake(ctx)

    path = f'/{path}' if path else ''

    coverage = ' --cov-report term-missing --cov zipper' if not nocov else ''
    verbosity = '-v' if verbose else ''
    cmd = f'pytest{coverage} tests{path} {verbosity}'
    ctx.run(cmd, pty=True)


@task
def server(ctx):
    from zipper.server.app import serve
    serve()


@task
def clean(ctx, verbose=False):
    cmd = 'find . -name "*.pyc" -delete'
    if verbose:
        print(cmd)
    ctx.run(cmd, pty=True)
