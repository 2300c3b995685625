# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tasks images resolution, and build and push to AWS ECR.
"""
