from __future__ import annotations

import json

import pytest


NPM_V3_WORKSPACES = {
    "name": "monorepo",
    "version": "1.0.0",
    "lockfileVersion": 3,
    "requires": True,
    "packages": {
        "": {
            "name": "monorepo",
            "version": "1.0.0",
            "workspaces": ["packages/*"],
            "dependencies": {"lodash": "^4.17.20", "foo": "*"},
        },
        "node_modules/lodash": {
            "version": "4.17.20",
            "resolved": "https://registry.npmjs.org/lodash/-/lodash-4.17.20.tgz",
            "integrity": "sha512-old",
        },
        "node_modules/foo": {"resolved": "packages/foo", "link": True},
        "node_modules/@scope/util": {
            "version": "1.2.0",
            "resolved": "https://registry.npmjs.org/@scope/util/-/util-1.2.0.tgz",
            "integrity": "sha512-util",
            "dependencies": {"tslib": "^2.0.0"},
        },
        "node_modules/tslib": {"version": "2.6.2", "integrity": "sha512-tslib"},
        "node_modules/fsevents": {"version": "2.3.3", "optional": True},
        "node_modules/jest": {"version": "29.7.0", "dev": True},
        "packages/foo": {
            "name": "foo",
            "version": "1.0.0",
            "dependencies": {"lodash": "^4.17.21", "@scope/util": "^1.0.0"},
            "optionalDependencies": {"fsevents": "^2.3.0"},
        },
        "packages/foo/node_modules/lodash": {
            "version": "4.17.21",
            "resolved": "https://registry.npmjs.org/lodash/-/lodash-4.17.21.tgz",
            "integrity": "sha512-new",
        },
    },
}

NPM_V1 = {
    "name": "app",
    "version": "1.0.0",
    "lockfileVersion": 1,
    "requires": True,
    "dependencies": {
        "ms": {"version": "2.1.3", "integrity": "sha512-ms3"},
        "debug": {
            "version": "4.3.4",
            "integrity": "sha512-debug",
            "requires": {"ms": "2.1.2"},
            "dependencies": {"ms": {"version": "2.1.2", "integrity": "sha512-ms2"}},
        },
        "alias": {"version": "npm:real-pkg@1.0.0"},
        "local": {"version": "file:../local"},
    },
}

PNPM_V5 = """\
lockfileVersion: 5.4

specifiers:
  '@types/node': ^20.0.0
  ms: ^2.1.3

dependencies:
  ms: 2.1.3

devDependencies:
  '@types/node': 20.10.0

packages:

  /ms/2.1.3:
    resolution: {integrity: sha512-ms}
    dev: false

  /@types/node/20.10.0:
    resolution: {integrity: sha512-node}
    dependencies:
      undici-types: 5.26.5
    dev: true

  /undici-types/5.26.5:
    resolution: {integrity: sha512-undici}
    dev: true

  /styled-jsx/5.1.1_react@18.2.0:
    resolution: {integrity: sha512-sj}
    dev: false
"""

PNPM_V5_INLINE = """\
lockfileVersion: 5.4-inlineSpecifiers

dependencies:
  lodash:
    specifier: ^4.17.21
    version: 4.17.21
  styled-jsx:
    specifier: ^5.1.1
    version: 5.1.1_react@18.2.0

packages:

  /lodash/4.17.21:
    resolution: {integrity: sha512-lodash}
    dev: false

  /styled-jsx/5.1.1_react@18.2.0:
    resolution: {integrity: sha512-sj}
    peerDependencies:
      react: '>= 16.8.0'
    dependencies:
      client-only: 0.0.1
      react: 18.2.0
    dev: false

  /client-only/0.0.1:
    resolution: {integrity: sha512-co}
    dev: false

  /react/18.2.0:
    resolution: {integrity: sha512-react}
    dev: false
"""

PNPM_SHRINKWRAP = """\
shrinkwrapVersion: 3
registry: 'https://registry.npmjs.org/'

specifiers:
  debug: ^4.1.0
  styled-jsx: ^3.2.1

dependencies:
  debug: 4.1.1
  styled-jsx: 3.2.1/react@16.8.0

packages:

  /debug/4.1.1:
    dependencies:
      ms: 2.1.1
    resolution:
      integrity: sha512-debug

  /ms/2.1.1:
    resolution:
      integrity: sha512-ms

  /styled-jsx/3.2.1/react@16.8.0:
    dependencies:
      react: 16.8.0
    resolution:
      integrity: sha512-sj

  /react/16.8.0:
    resolution:
      integrity: sha512-react
"""


PNPM_V6_WORKSPACES = """\
lockfileVersion: '6.0'

importers:

  .:
    devDependencies:
      typescript:
        specifier: ^5.0.0
        version: 5.3.3

  packages/bar:
    dependencies:
      leftpad:
        specifier: ^1.0.0
        version: 1.0.0

  packages/baz:
    dependencies:
      bar:
        specifier: workspace:*
        version: link:../bar
      react-dom:
        specifier: ^18.2.0
        version: 18.2.0(react@18.2.0)

packages:

  /leftpad@2.0.0:
    resolution: {integrity: sha512-left2}
    dev: false

  /leftpad@1.0.0:
    resolution: {integrity: sha512-left1}
    dev: false

  /typescript@5.3.3:
    resolution: {integrity: sha512-ts}
    dev: true

  /react@18.2.0:
    resolution: {integrity: sha512-react}
    dependencies:
      loose-envify: 1.4.0
    dev: false

  /react-dom@18.2.0(react@18.2.0):
    resolution: {integrity: sha512-rd}
    peerDependencies:
      react: ^18.2.0
    dependencies:
      loose-envify: 1.4.0
      react: 18.2.0
      scheduler: 0.23.0
    dev: false

  /loose-envify@1.4.0:
    resolution: {integrity: sha512-le}
    dev: false

  /scheduler@0.23.0:
    resolution: {integrity: sha512-sched}
    dependencies:
      loose-envify: 1.4.0
    dev: false
"""

PNPM_V9 = """\
lockfileVersion: '9.0'

settings:
  autoInstallPeers: true
  excludeLinksFromLockfile: false

importers:

  .:
    dependencies:
      react-dom:
        specifier: ^18.2.0
        version: 18.2.0(react@18.2.0)
      string-width-cjs:
        specifier: npm:string-width@^4.2.0
        version: string-width@4.2.3

packages:

  loose-envify@1.4.0:
    resolution: {integrity: sha512-le}
    hasBin: true

  react-dom@18.2.0:
    resolution: {integrity: sha512-rd}
    peerDependencies:
      react: ^18.2.0

  react@18.2.0:
    resolution: {integrity: sha512-react}

  string-width@4.2.3:
    resolution: {integrity: sha512-sw}

snapshots:

  loose-envify@1.4.0: {}

  react-dom@18.2.0(react@18.2.0):
    dependencies:
      loose-envify: 1.4.0
      react: 18.2.0

  react@18.2.0:
    dependencies:
      loose-envify: 1.4.0

  string-width@4.2.3: {}
"""

YARN_CLASSIC = """\
# THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.
# yarn lockfile v1


"@babel/code-frame@^7.0.0":
  version "7.12.13"
  resolved "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.12.13.tgz#dcfc826b"
  integrity sha512-cf
  dependencies:
    "@babel/highlight" "^7.12.13"

"@babel/highlight@^7.12.13":
  version "7.14.0"
  resolved "https://registry.yarnpkg.com/@babel/highlight/-/highlight-7.14.0.tgz#3197e375"
  integrity sha512-hl
  dependencies:
    js-tokens "^4.0.0"

js-tokens@^4.0.0:
  version "4.0.0"
  resolved "https://registry.yarnpkg.com/js-tokens/-/js-tokens-4.0.0.tgz#19203fb5"
  integrity sha512-jst

lodash@^4.17.20, lodash@^4.17.21:
  version "4.17.21"
  resolved "https://registry.yarnpkg.com/lodash/-/lodash-4.17.21.tgz#679591c5"
  integrity sha512-lodash4

lodash@^3.0.0:
  version "3.10.1"
  resolved "https://registry.yarnpkg.com/lodash/-/lodash-3.10.1.tgz#5bf45e8e"
  integrity sha512-lodash3

"local-pkg@file:./local":
  version "1.0.0"
  resolved "file:./local"

"string-width-cjs@npm:string-width@^4.2.0":
  version "4.2.3"
  resolved "https://registry.yarnpkg.com/string-width/-/string-width-4.2.3.tgz#269c7117"
  integrity sha512-sw
"""

YARN_BERRY = """\
# This file is generated by running "yarn install" inside your project.
# Manual changes might be lost - proceed with caution!

__metadata:
  version: 6
  cacheKey: 8

"is-fullwidth-code-point@npm:^3.0.0":
  version: 3.0.0
  resolution: "is-fullwidth-code-point@npm:3.0.0"
  checksum: 44a30c29457c7fb8f00297bce733f0a64cd22eca270f83e58c105e0d015e45c019491a4ab2faef91ab51d4738c670daff901c799f6a700e27f7314029e99e348
  languageName: node
  linkType: hard

"lodash@npm:^4.17.21":
  version: 4.17.21
  resolution: "lodash@npm:4.17.21"
  checksum: eb835a2e51d381e561e508ce932ea50a8e5a68f4ebdd771ea240d3048244a8d13658acbd502cd4829768c56f2e16bdd4340b9ea141297d472517b83868e677f7
  languageName: node
  linkType: hard

"monorepo@workspace:.":
  version: 0.0.0-use.local
  resolution: "monorepo@workspace:."
  dependencies:
    my-lib: "workspace:^"
  languageName: unknown
  linkType: soft

"my-lib@workspace:^, my-lib@workspace:packages/my-lib":
  version: 0.0.0-use.local
  resolution: "my-lib@workspace:packages/my-lib"
  dependencies:
    lodash: ^4.17.21
    string-width-cjs: "npm:string-width@^4.2.0"
  languageName: unknown
  linkType: soft

"string-width-cjs@npm:string-width@^4.2.0, string-width@npm:^4.2.0":
  version: 4.2.3
  resolution: "string-width@npm:4.2.3"
  dependencies:
    is-fullwidth-code-point: ^3.0.0
  checksum: e52c10dc3fbfcd6c3a15f159f54a90024241d0f149cf8aed2982a2d801d2e64df0bf1dc351cf8e95c3319323f9f220c16e740b06faecd53e2462df1d2b5443fb
  languageName: node
  linkType: hard
"""


@pytest.fixture
def npm_v3_content() -> str:
    return json.dumps(NPM_V3_WORKSPACES, indent=2)


@pytest.fixture
def npm_v1_content() -> str:
    return json.dumps(NPM_V1, indent=2)


@pytest.fixture
def pnpm_v5_content() -> str:
    return PNPM_V5


@pytest.fixture
def pnpm_v5_inline_content() -> str:
    return PNPM_V5_INLINE


@pytest.fixture
def pnpm_shrinkwrap_content() -> str:
    return PNPM_SHRINKWRAP


@pytest.fixture
def pnpm_v6_content() -> str:
    return PNPM_V6_WORKSPACES


@pytest.fixture
def pnpm_v9_content() -> str:
    return PNPM_V9


@pytest.fixture
def yarn_classic_content() -> str:
    return YARN_CLASSIC


@pytest.fixture
def yarn_berry_content() -> str:
    return YARN_BERRY


@pytest.fixture
def all_lockfiles(
    npm_v3_content,
    npm_v1_content,
    pnpm_shrinkwrap_content,
    pnpm_v5_content,
    pnpm_v5_inline_content,
    pnpm_v6_content,
    pnpm_v9_content,
    yarn_classic_content,
    yarn_berry_content,
) -> dict[str, str]:
    return {
        "npm-v3": npm_v3_content,
        "npm-v1": npm_v1_content,
        "pnpm-shrinkwrap": pnpm_shrinkwrap_content,
        "pnpm-v5": pnpm_v5_content,
        "pnpm-v5-inline": pnpm_v5_inline_content,
        "pnpm-v6": pnpm_v6_content,
        "pnpm-v9": pnpm_v9_content,
        "yarn-classic": yarn_classic_content,
        "yarn-berry": yarn_berry_content,
    }
