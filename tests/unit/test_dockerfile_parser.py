from certinject.PARSERS.dockerfile_parser import DockerfileParser

def test_parse_from_string():
    content = """
    FROM eclipse-temurin:17-jre
    WORKDIR /app
    COPY cert-0-ca.crt /tmp/certs/cert-0-ca.crt
    RUN cp /tmp/certs/cert-0-ca.crt /usr/local/share/ca-certificates/ \
        && update-ca-certificates
    CMD ["java", "-jar", "app.jar"]
    """
    parser = DockerfileParser()
    instructions = parser.parse_from_string(content)

    inst_names = [i.instruction for i in instructions]
    assert inst_names == ["FROM", "WORKDIR", "COPY", "RUN", "CMD"]

    cmd_inst = next(i for i in instructions if i.instruction == "CMD")
    assert cmd_inst.arguments == ["java", "-jar", "app.jar"]

    run_inst = next(i for i in instructions if i.instruction == "RUN")
    assert "&& update-ca-certificates" in run_inst.arguments[0]

def test_lowercase_instructions():
    parser = DockerfileParser()
    assert parser.base_image("from alpine:3.19\nrun echo hi\n") == "alpine:3.19"

def test_no_from():
    assert DockerfileParser().base_image("# nothing here\n") is None
    assert DockerfileParser().base_image("") is None

def test_stage_name_and_platform():
    parser = DockerfileParser()
    stages = parser.parse_stages("FROM --platform=linux/amd64 openjdk:17 AS builder\nRUN make\n")
    assert len(stages) == 1
    assert stages[0].base_image == "openjdk:17"
    assert stages[0].name == "builder"
    assert stages[0].platform == "linux/amd64"
    assert [i.instruction for i in stages[0].instructions] == ["RUN"]

def test_final_stage_wins():
    content = """
    FROM maven:3.9-eclipse-temurin-17 AS build
    RUN mvn package
    FROM registry.access.redhat.com/ubi9/openjdk-17-runtime
    COPY --from=build /src/target/app.jar /deployments/
    """
    assert DockerfileParser().base_image(content) == "registry.access.redhat.com/ubi9/openjdk-17-runtime"

def test_stage_reference_resolves_to_its_image():
    content = """
    FROM ubuntu:22.04 AS base
    RUN apt-get update
    FROM base
    RUN echo done
    """
    assert DockerfileParser().base_image(content) == "ubuntu:22.04"

def test_global_arg_in_from():
    content = """
    ARG BASE=eclipse-temurin:17-jre-alpine
    FROM ${BASE}
    """
    assert DockerfileParser().base_image(content) == "eclipse-temurin:17-jre-alpine"

def test_build_args_override_defaults():
    content = "ARG BASE=alpine:3.19\nFROM ${BASE}\n"
    parser = DockerfileParser(build_args={"BASE": "fedora:39"})
    assert parser.base_image(content) == "fedora:39"

def test_unresolved_arg_is_left_as_is():
    content = "ARG BASE\nFROM ${BASE}\n"
    assert DockerfileParser().base_image(content) == "${BASE}"

def test_base_image_from_file(tmp_path):
    dockerfile = tmp_path / "Dockerfile"
    dockerfile.write_text("FROM node:16-alpine\nCMD [\"node\", \"index.js\"]\n")
    assert DockerfileParser().base_image_from_file(str(dockerfile)) == "node:16-alpine"
