from click.testing import CliRunner
from certinject.CLI.main import cli

def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'CA certificate injection' in result.output

def test_cli_commands():
    runner = CliRunner()
    result = runner.invoke(cli, ['commands', '-b', 'openjdk:11-jre-alpine', '/certs/corp.crt'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == 'cp /tmp/certs/cert-0-corp.crt /usr/local/share/ca-certificates/'
    assert lines[1] == 'update-ca-certificates'
    assert lines[2].startswith('keytool -importcert')
    assert len(lines) == 3

def test_cli_commands_without_certificates():
    runner = CliRunner()
    result = runner.invoke(cli, ['commands', '-b', 'alpine'])
    assert result.exit_code == 0
    assert result.output == ''

def test_cli_copy_entries():
    runner = CliRunner()
    result = runner.invoke(cli, ['copy-entries', '/path/to/cert1.crt', '/path/to/cert2.pem'])
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        'cert-0-cert1.crt /tmp/certs/cert-0-cert1.crt',
        'cert-1-cert2.pem /tmp/certs/cert-1-cert2.pem',
    ]

def test_cli_detect():
    runner = CliRunner()
    result = runner.invoke(cli, ['detect', 'registry.access.redhat.com/ubi8/openjdk-11'])
    assert result.exit_code == 0
    assert 'redhat' in result.output
    assert 'java' in result.output

def test_cli_dockerfile_from_options():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ['dockerfile', '-b', 'ubuntu:22.04', '-u', 'app', 'ca.crt'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == 'COPY cert-0-ca.crt /tmp/certs/cert-0-ca.crt'
    assert lines[1] == 'USER root'
    assert lines[-1] == 'USER app'

def test_cli_dockerfile_reads_base_image_from_dockerfile():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('Dockerfile', 'w') as f:
            f.write('FROM centos:7\n')
        result = runner.invoke(cli, ['dockerfile', '-d', 'Dockerfile', 'ca.crt'])
    assert result.exit_code == 0
    assert 'update-ca-trust' in result.output

def test_cli_dockerfile_from_config():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('certinject.yml', 'w') as f:
            f.write('base_image: openjdk:17-jdk-alpine\ncertificates:\n  - /etc/ssl/root.pem\n')
        result = runner.invoke(cli, ['dockerfile'])
    assert result.exit_code == 0
    assert 'COPY cert-0-root.pem /tmp/certs/cert-0-root.pem' in result.output
    assert 'keytool' in result.output

def test_cli_dockerfile_without_base_image():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ['dockerfile', 'ca.crt'])
    assert result.exit_code == 1
    assert 'Error: no base image given' in result.output

def test_cli_dockerfile_bad_config():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('broken.yml', 'w') as f:
            f.write('- not\n- a mapping\n')
        result = runner.invoke(cli, ['-c', 'broken.yml', 'dockerfile', '-b', 'alpine'])
    assert result.exit_code == 1
    assert 'Error:' in result.output

def test_cli_dockerfile_missing_dockerfile():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ['dockerfile', '-d', 'nope/Dockerfile', 'ca.crt'])
    assert result.exit_code == 1
    assert 'Error:' in result.output

def test_cli_dockerfile_copies_where_commands_read():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ['dockerfile', '-b', 'openjdk:11-jre-alpine', '/a/root.crt', '/b/sub.pem'])
    assert result.exit_code == 0

    copied = set()
    read = set()
    for line in result.output.splitlines():
        words = line.strip().split()
        if line.startswith('COPY '):
            copied.add(words[2])
        for i, word in enumerate(words):
            if word == 'cp' or (word == '-file' and words[i - 1].startswith('jkube-cert-')):
                read.add(words[i + 1])
    assert copied == {'/tmp/certs/cert-0-root.crt', '/tmp/certs/cert-1-sub.pem'}
    assert read == copied

def test_cli_dockerfile_has_no_target_dir_option():
    runner = CliRunner()
    result = runner.invoke(cli, ['dockerfile', '-b', 'alpine:3.19', '-t', '/opt/certs', 'ca.crt'])
    assert result.exit_code == 2
    assert 'No such option' in result.output
