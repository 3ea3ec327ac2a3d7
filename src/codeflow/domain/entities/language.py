"""Languages supported by the editor, with their starter templates."""

from enum import Enum


class Language(str, Enum):
    """Fixed set of snippet languages."""

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    C = "c"
    CPP = "cpp"
    CSHARP = "csharp"
    GO = "go"
    RUBY = "ruby"
    PHP = "php"
    BASH = "bash"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


_DEFAULT_CODE: dict[Language, str] = {
    Language.JAVASCRIPT: (
        "// JavaScript (Node.js) Example\n"
        "function greet(name) {\n"
        "  return `Hello, ${name}!`;\n"
        "}\n"
        'console.log(greet("World"));'
    ),
    Language.PYTHON: (
        "# Python Example\n"
        "def greet(name):\n"
        '    return f"Hello, {name}!"\n'
        'print(greet("World"))'
    ),
    Language.JAVA: (
        "// Java Example\n"
        "public class Main {\n"
        "    public static void main(String[] args) {\n"
        '        System.out.println(greet("World"));\n'
        "    }\n"
        "\n"
        "    public static String greet(String name) {\n"
        '        return "Hello, " + name + "!";\n'
        "    }\n"
        "}"
    ),
    Language.C: (
        "// C Example\n"
        "#include <stdio.h>\n"
        "\n"
        "void greet(const char* name) {\n"
        '    printf("Hello, %s!\\n", name);\n'
        "}\n"
        "\n"
        "int main() {\n"
        '    greet("World");\n'
        "    return 0;\n"
        "}"
    ),
    Language.CPP: (
        "// C++ Example\n"
        "#include <iostream>\n"
        "#include <string>\n"
        "\n"
        "void greet(const std::string& name) {\n"
        '    std::cout << "Hello, " << name << "!" << std::endl;\n'
        "}\n"
        "\n"
        "int main() {\n"
        '    greet("World");\n'
        "    return 0;\n"
        "}"
    ),
    Language.CSHARP: (
        "// C# Example\n"
        "using System;\n"
        "\n"
        "class Program {\n"
        "    static void Main() {\n"
        '        Console.WriteLine(Greet("World"));\n'
        "    }\n"
        "\n"
        "    static string Greet(string name) {\n"
        '        return $"Hello, {name}!";\n'
        "    }\n"
        "}"
    ),
    Language.GO: (
        "// Go Example\n"
        "package main\n"
        "\n"
        'import "fmt"\n'
        "\n"
        "func greet(name string) string {\n"
        '    return fmt.Sprintf("Hello, %s!", name)\n'
        "}\n"
        "\n"
        "func main() {\n"
        '    fmt.Println(greet("World"))\n'
        "}"
    ),
    Language.RUBY: (
        "# Ruby Example\n"
        "def greet(name)\n"
        '  "Hello, #{name}!"\n'
        "end\n"
        "\n"
        'puts greet("World")'
    ),
    Language.PHP: (
        "<?php\n"
        "// PHP Example\n"
        "function greet($name) {\n"
        '    return "Hello, $name!";\n'
        "}\n"
        "\n"
        'echo greet("World");\n'
        "?>"
    ),
    Language.BASH: (
        "#!/bin/bash\n"
        "# Bash Example\n"
        "greet() {\n"
        '    echo "Hello, $1!"\n'
        "}\n"
        "\n"
        'greet "World"'
    ),
}


def default_code_for(language: str) -> str:
    """Return the starter template for ``language``, or an empty string."""
    try:
        return _DEFAULT_CODE[Language(language)]
    except ValueError:
        return ""
